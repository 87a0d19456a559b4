from __future__ import annotations
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from onewire.parser import ZERO_K, is_error, parse_value, status_ok
from onewire.source import LineStream

class Stage(Enum):
    AWAITING_STATUS = 'awaiting_status'
    AWAITING_VALUE = 'awaiting_value'
    DONE = 'done'

class Event(Enum):
    LINE = 'line'
    EOF = 'eof'
    PENDING = 'pending'   # no complete line yet

class Action(Enum):
    NONE = 'none'
    ADVANCE = 'advance'
    COMPLETE = 'complete'

class Outcome(Enum):
    OK = 'ok'
    OPEN_FAILED = 'open_failed'
    CRC_FAILED = 'crc_failed'
    BAD_VALUE = 'bad_value'
    EOF = 'eof'
    TIMEOUT = 'timeout'

@dataclass(frozen=True)
class Step:
    action: Action
    next: Stage
    value: float = ZERO_K
    outcome: Optional[Outcome] = None

def transition(stage: Stage, event: Event, line: str | None = None) -> Step:
    """
    Pure transition function of a temperature read.

    AWAITING_STATUS consumes the CRC line and either advances or fails,
    AWAITING_VALUE consumes the t=<millidegrees> line and always completes.
    End of stream in either stage fails with ZERO_K. PENDING never changes state.
    """
    if stage is Stage.DONE or event is Event.PENDING:
        return Step(Action.NONE, stage)
    if event is Event.EOF:
        return Step(Action.COMPLETE, Stage.DONE, ZERO_K, Outcome.EOF)
    if stage is Stage.AWAITING_STATUS:
        if status_ok(line or ''):
            return Step(Action.ADVANCE, Stage.AWAITING_VALUE)
        return Step(Action.COMPLETE, Stage.DONE, ZERO_K, Outcome.CRC_FAILED)
    temp = parse_value(line or '')
    return Step(Action.COMPLETE, Stage.DONE, temp, Outcome.BAD_VALUE if is_error(temp) else Outcome.OK)


Callback = Callable[[float], None]

class AsyncReadSession:
    """
    One in-flight, non-blocking read of a device.

    start() pumps the stream right away; whenever no complete line is available
    the pump re-arms itself on the scheduler after `poll_ms`. The stream is
    closed exactly once, when the session reaches DONE, whatever the outcome.
    """
    def __init__(self, device: str, stream: LineStream, scheduler, callback: Callback,
                 poll_ms: int = 50, timeout_s: float | None = None):
        self.device = device
        self.stage = Stage.AWAITING_STATUS
        self.outcome: Optional[Outcome] = None
        self.on_done: Optional[Callable[["AsyncReadSession"], None]] = None
        self._stream = stream
        self._scheduler = scheduler
        self._callbacks: List[Callback] = [callback]
        self._poll_ms = max(1, int(poll_ms))
        self._timeout_s = timeout_s
        self._closed = False
        self._log = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @property
    def done(self) -> bool:
        return self.stage is Stage.DONE

    def add_callback(self, callback: Callback) -> None:
        if self.done:
            raise RuntimeError(f"read of {self.device} already finished")
        self._callbacks.append(callback)

    def start(self) -> None:
        self._log.debug("Reading %s", self.device)
        if self._timeout_s is not None:
            self._scheduler.after(int(1000.0 * self._timeout_s), self._on_timeout)
        self.pump()

    def pump(self) -> None:
        while not self.done:
            try:
                line = self._stream.readline()
            except OSError as e:
                self._log.warning("Read error on %s: %s", self.device, e)
                line = ''
            event = Event.PENDING if line is None else Event.EOF if line == '' else Event.LINE
            self._apply(transition(self.stage, event, line))
            if event is Event.PENDING:
                self._scheduler.after(self._poll_ms, self.pump)
                return

    def _apply(self, step: Step) -> None:
        if step.action is Action.COMPLETE:
            self._finish(step.value, step.outcome)
        else:
            self.stage = step.next

    def _on_timeout(self) -> None:
        if not self.done:
            self._finish(ZERO_K, Outcome.TIMEOUT)

    def _finish(self, value: float, outcome: Outcome | None) -> None:
        self.stage = Stage.DONE
        self.outcome = outcome
        if outcome is Outcome.OK:
            self._log.debug("%s -> %.3f", self.device, value)
        elif outcome is Outcome.CRC_FAILED:
            self._log.info("%s: CRC check failed", self.device)
        else:
            self._log.warning("%s: read failed (%s)", self.device, getattr(outcome, 'value', outcome))
        try:
            if self.on_done is not None:
                self.on_done(self)
            for cb in self._callbacks:
                try:
                    cb(value)
                except Exception:
                    self._log.exception("Callback for %s failed", self.device)
        finally:
            self._close()

    def _close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._stream.close()
        except OSError as e:
            self._log.warning("Closing %s failed: %s", self.device, e)
