import os
from onewire.source import NonBlockingLineStream, SysfsLineSource, devices, family_of
from conftest import write_slave

def test_devices_lists_matching_entries(sysfs):
    for name in ["28-0316a2795aff", "10-000802b4ba0e", "3B-0000001a2b3c"]:
        write_slave(sysfs, name, "")
    os.makedirs(sysfs / "w1_bus_master1")
    os.makedirs(sysfs / "28-short")
    assert devices(root=str(sysfs)) == ["10-000802b4ba0e", "28-0316a2795aff", "3B-0000001a2b3c"]
    assert devices("28", root=str(sysfs)) == ["28-0316a2795aff"]
    assert devices("42", root=str(sysfs)) == []

def test_devices_missing_root(tmp_path):
    assert devices(root=str(tmp_path / "nope")) == []

def test_family_of():
    assert family_of("28-0316a2795aff") == "28"

def test_nonblocking_stream_lines(tmp_path):
    p = tmp_path / "f"
    p.write_text("7f YES\n28 t=1000")
    s = NonBlockingLineStream(os.open(str(p), os.O_RDONLY | os.O_NONBLOCK), chunk=4)
    assert s.readline() == "7f YES\n"
    assert s.readline() == "28 t=1000"
    assert s.readline() == ""
    s.close(); s.close()
    assert s.closed

def test_sysfs_source_paths(sysfs):
    src = SysfsLineSource(str(sysfs))
    path = write_slave(sysfs, "28-000000000001", "7f YES\n28 t=1\n")
    assert src.path_for("28-000000000001") == path
    stream = src.open("28-000000000001", blocking=True)
    try:
        assert stream.readline() == "7f YES\n"
    finally:
        stream.close()

def test_nonblocking_stream_waits_for_partial_line():
    r, w = os.pipe()
    os.set_blocking(r, False)
    s = NonBlockingLineStream(r)
    try:
        assert s.readline() is None
        os.write(w, b"7f Y")
        assert s.readline() is None
        os.write(w, b"ES\n28 t=1")
        assert s.readline() == "7f YES\n"
        assert s.readline() is None
        os.write(w, b"000\n")
        os.close(w); w = None
        assert s.readline() == "28 t=1000\n"
        assert s.readline() == ""
    finally:
        s.close()
        if w is not None:
            os.close(w)
