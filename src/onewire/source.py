from __future__ import annotations
import glob, logging, os
from typing import List, Optional, Protocol

W1_ROOT = "/sys/bus/w1/devices"
W1_SLAVE = "w1_slave"

_HEX = '[0-9a-fA-F]'
ANY_FAMILY = _HEX * 2
SERIAL_PATTERN = _HEX * 12

log = logging.getLogger(__name__)

def devices(family: str | None = None, root: str = W1_ROOT) -> List[str]:
    """
    List connected devices whose family matches the glob pattern `family`
    (any two-hex-digit family by default). Returns bare identifiers such as
    '28-0316a2795aff', sorted.
    """
    pattern = f"{family or ANY_FAMILY}-{SERIAL_PATTERN}"
    found = sorted(os.path.basename(p) for p in glob.glob(os.path.join(glob.escape(root), pattern)))
    log.debug("devices family=%s root=%s -> %d", family or "*", root, len(found))
    return found

def family_of(device: str) -> str:
    return device[:2]


class LineStream(Protocol):
    def readline(self) -> Optional[str]:
        """Next line; '' at end of stream, None when no complete line is available yet."""
        ...
    def close(self) -> None: ...


class LineSource(Protocol):
    def open(self, device: str, blocking: bool = True) -> LineStream:
        """Open one driver read cycle for `device`. Raises OSError when it cannot."""
        ...


class BlockingLineStream:
    def __init__(self, f):
        self._f = f
    def readline(self) -> str:
        return self._f.readline()
    def close(self) -> None:
        self._f.close()


class NonBlockingLineStream:
    """Line reader over a descriptor opened with O_NONBLOCK, buffering partial lines."""
    def __init__(self, fd: int, chunk: int = 256):
        self._fd = fd; self._chunk = chunk
        self._buf = b""; self._eof = False; self.closed = False

    def readline(self) -> Optional[str]:
        while True:
            nl = self._buf.find(b"\n")
            if nl >= 0:
                line, self._buf = self._buf[:nl + 1], self._buf[nl + 1:]
                return line.decode("ascii", errors="replace")
            if self._eof:
                # trailing data without newline still counts as a line
                line, self._buf = self._buf, b""
                return line.decode("ascii", errors="replace")
            try:
                data = os.read(self._fd, self._chunk)
            except BlockingIOError:
                return None
            except InterruptedError:
                continue
            if not data:
                self._eof = True
            else:
                self._buf += data

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            os.close(self._fd)


class SysfsLineSource:
    """
    Opens <root>/<device>/<slave> as exposed by the w1_therm kernel module.

    O_NONBLOCK has no effect on sysfs attributes: the first read of w1_slave
    blocks for the whole conversion (up to ~750ms for a 12-bit DS18B20). The
    non-blocking stream only avoids blocking on sources that honour it, such
    as pipes.
    """
    def __init__(self, root: str = W1_ROOT, slave: str = W1_SLAVE):
        self.root = root; self.slave = slave

    def path_for(self, device: str) -> str:
        return os.path.join(self.root, device, self.slave)

    def open(self, device: str, blocking: bool = True) -> LineStream:
        path = self.path_for(device)
        if blocking:
            return BlockingLineStream(open(path, "r", encoding="ascii", errors="replace"))
        fd = os.open(path, os.O_RDONLY | os.O_NONBLOCK)
        return NonBlockingLineStream(fd)
