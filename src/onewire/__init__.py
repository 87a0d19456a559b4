from onewire.config import OneWireConfig, load_config
from onewire.parser import ZERO_K
from onewire.scheduler import AsyncioScheduler, ManualScheduler, Poller
from onewire.sinks import BoundValue, CallbackSink, SkipErrorSink
from onewire.source import SysfsLineSource, devices
from onewire.w1 import Binding, ConfigurationError, OneWire, OneWireError

__all__ = [
    "OneWire", "OneWireConfig", "load_config", "ZERO_K",
    "AsyncioScheduler", "ManualScheduler", "Poller",
    "BoundValue", "CallbackSink", "SkipErrorSink",
    "SysfsLineSource", "devices",
    "Binding", "ConfigurationError", "OneWireError",
]
