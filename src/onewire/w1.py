from __future__ import annotations
import functools
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from onewire.config import OneWireConfig
from onewire.parser import ZERO_K, parse_value, status_ok
from onewire.scheduler import Poller, Scheduler
from onewire.session import AsyncReadSession, Outcome
from onewire.sinks import SkipErrorSink, ValueSink, as_sink
from onewire.source import LineSource, SysfsLineSource, devices, family_of

# Thermometer families handled by w1_therm, see
# https://www.kernel.org/doc/Documentation/w1/slaves/w1_therm
TEMP_FAMILIES = frozenset({'10', '22', '28', '3B', '42'})


class OneWireError(Exception):
    pass

class ConfigurationError(OneWireError, ValueError):
    pass


@dataclass
class Binding:
    device: str
    destination: ValueSink
    period_s: float
    type: str
    poller: Poller = field(repr=False)

    @property
    def active(self) -> bool:
        return self.poller.running

    def cancel(self) -> None:
        self.poller.stop()


class OneWire:
    """
    Temperature access to w1_therm sensors.

    - temperature(dev) blocks and returns the reading.
    - temperature(dev, cb) reads without blocking and calls cb(reading) once.
    - bind(dev, dest) keeps dest updated with every good reading.

    All read failures (missing device, CRC mismatch, malformed value, vanished
    stream) yield ZERO_K instead of raising. Callback reads and bindings need a
    scheduler: any object with after(ms, fn), such as AsyncioScheduler or a
    tkinter root.
    """
    def __init__(self, cfg: OneWireConfig | None = None, scheduler: Scheduler | None = None,
                 source: LineSource | None = None):
        self.cfg = cfg or OneWireConfig()
        self.scheduler = scheduler
        self.source = source or SysfsLineSource(self.cfg.root, self.cfg.slave)
        self._inflight: Dict[str, AsyncReadSession] = {}
        self._log = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def devices(self, family: str | None = None) -> List[str]:
        return devices(family, self.cfg.root)

    def type_for(self, device: str, type: str = "") -> str:
        """Resolve the sensor type of `device`, guessing from its family when `type` is empty."""
        if not type and family_of(device).upper() in TEMP_FAMILIES:
            type = "TEMP"
        if type.upper().startswith("TEMP"):
            return "TEMP"
        raise ConfigurationError(f"Unknown type: {type!r} for device {device}")

    def temperature(self, device: str, callback: Optional[Callable[[float], None]] = None) -> Optional[float]:
        if callback is None:
            return self._read_blocking(device)
        self._read_async(device, callback)
        return None

    def _read_blocking(self, device: str) -> float:
        try:
            stream = self.source.open(device, blocking=True)
        except OSError as e:
            self._log.warning("Cannot open %s: %s", device, e)
            return ZERO_K
        try:
            if not status_ok(stream.readline() or ""):
                self._log.info("%s: CRC check failed", device)
                return ZERO_K
            return parse_value(stream.readline() or "")
        except (OSError, ValueError) as e:
            self._log.warning("Read error on %s: %s", device, e)
            return ZERO_K
        finally:
            stream.close()

    def _read_async(self, device: str, callback: Callable[[float], None]) -> None:
        scheduler = self._require_scheduler()
        if self.cfg.coalesce_reads and device in self._inflight:
            self._log.debug("Joining in-flight read of %s", device)
            self._inflight[device].add_callback(callback)
            return
        try:
            stream = self.source.open(device, blocking=False)
        except OSError as e:
            self._log.warning("Cannot open %s: %s (%s)", device, e, Outcome.OPEN_FAILED.value)
            try:
                callback(ZERO_K)
            except Exception:
                self._log.exception("Callback for %s failed", device)
            return
        session = AsyncReadSession(device, stream, scheduler, callback,
                                   poll_ms=self.cfg.read_poll_ms, timeout_s=self.cfg.read_timeout_s)
        if self.cfg.coalesce_reads:
            self._inflight[device] = session
            session.on_done = self._forget
        session.start()

    def _forget(self, session: AsyncReadSession) -> None:
        if self._inflight.get(session.device) is session:
            del self._inflight[session.device]

    def bind(self, device: str, destination, period: float = -1, type: str = "") -> Binding:
        """
        Poll `device` every `period` seconds (cfg.poll_s when negative) and write
        each good reading to `destination`, a ValueSink or a plain callable.
        The destination is set to ZERO_K first and keeps its last good value
        when a reading fails.
        """
        kind = self.type_for(device, type)
        self._require_scheduler()
        dest = as_sink(destination)
        if period < 0:
            period = self.cfg.poll_s

        dest.set(ZERO_K)
        sink = SkipErrorSink(dest, ZERO_K)
        poller = Poller(self.scheduler, period, functools.partial(self.temperature, device, sink.set), name=device)
        binding = Binding(device=device, destination=dest, period_s=period, type=kind, poller=poller)
        poller.start()
        return binding

    def _require_scheduler(self) -> Scheduler:
        if self.scheduler is None:
            raise ConfigurationError("a scheduler is required for callback reads and bindings")
        return self.scheduler
