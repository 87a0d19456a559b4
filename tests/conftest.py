import os
from typing import Dict, List, Optional
import pytest
from onewire.config import OneWireConfig
from onewire.scheduler import ManualScheduler

class FakeStream:
    """Scripted line stream: str items are lines, None means 'not ready yet'."""
    def __init__(self, lines: List[Optional[str]], eof: bool = True):
        self._lines = list(lines); self._eof = eof
        self.reads = 0; self.closes = 0
    def readline(self):
        self.reads += 1
        if self._lines:
            return self._lines.pop(0)
        return "" if self._eof else None
    def close(self):
        self.closes += 1

class FakeSource:
    """Hands out one scripted stream per open; the last script is reused."""
    def __init__(self, scripts: Dict[str, List[List[Optional[str]]]] | None = None, eof: bool = True):
        self.scripts = scripts or {}; self.eof = eof
        self.opened: List[FakeStream] = []
    def open(self, device: str, blocking: bool = True):
        if device not in self.scripts:
            raise FileNotFoundError(device)
        queue = self.scripts[device]
        script = queue.pop(0) if len(queue) > 1 else list(queue[0])
        stream = FakeStream(script, eof=self.eof)
        self.opened.append(stream)
        return stream

def write_slave(root, device: str, text: Optional[str]) -> str:
    d = os.path.join(str(root), device)
    os.makedirs(d, exist_ok=True)
    path = os.path.join(d, "w1_slave")
    if text is not None:
        with open(path, "w") as f:
            f.write(text)
    return path

@pytest.fixture
def sched():
    return ManualScheduler()

@pytest.fixture
def sysfs(tmp_path):
    return tmp_path

@pytest.fixture
def cfg(sysfs):
    return OneWireConfig(root=str(sysfs))
