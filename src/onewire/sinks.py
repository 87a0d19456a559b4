from __future__ import annotations
import logging
from typing import Callable, List, Optional, Protocol

from onewire.parser import ZERO_K

class ValueSink(Protocol):
    def set(self, value: float) -> None: ...


class BoundValue:
    """A destination for bindings: holds the last written value and notifies listeners."""
    def __init__(self, value: Optional[float] = None):
        self.value = value
        self._listeners: List[Callable[[float], None]] = []
        self._log = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def get(self) -> Optional[float]:
        return self.value

    def set(self, value: float) -> None:
        self.value = value
        for cb in list(self._listeners):
            try:
                cb(value)
            except Exception as e:
                self._log.error("Listener error: %s", e)

    def add_listener(self, cb: Callable[[float], None]) -> None:
        if cb not in self._listeners:
            self._listeners.append(cb)

    def remove_listener(self, cb: Callable[[float], None]) -> None:
        try:
            self._listeners.remove(cb)
        except ValueError:
            pass


class CallbackSink:
    def __init__(self, fn: Callable[[float], None]):
        self._fn = fn
    def set(self, value: float) -> None:
        self._fn(value)


class SkipErrorSink:
    """Forwards to `dest` unless the value is the error value, keeping the last good reading."""
    def __init__(self, dest: ValueSink, errval: float = ZERO_K):
        self.dest = dest; self.errval = errval
    def set(self, value: float) -> None:
        if value != self.errval:
            self.dest.set(value)


def as_sink(obj) -> ValueSink:
    if callable(getattr(obj, "set", None)):
        return obj
    if callable(obj):
        return CallbackSink(obj)
    raise TypeError(f"not a value sink: {obj!r}")
