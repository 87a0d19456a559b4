from __future__ import annotations
import os
from typing import Optional
import yaml
from pydantic import BaseModel, Field

class LoggingSettings(BaseModel):
    enabled: bool = True
    level: str = "INFO"
    file: Optional[str] = None

class OneWireConfig(BaseModel):
    root: str = "/sys/bus/w1/devices"
    slave: str = "w1_slave"
    poll_s: float = 10.0          # default binding period
    read_poll_ms: int = Field(default=50, ge=1)   # re-check interval while a line is pending
    read_timeout_s: Optional[float] = None        # None waits for EOF
    coalesce_reads: bool = True
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

CONFIG_PATHS = ['config/onewire.yaml', 'onewire.yaml']

def load_config(path: str | None = None) -> OneWireConfig:
    for p in ([path] if path else []) + CONFIG_PATHS:
        if p and os.path.exists(p):
            with open(p, 'r') as f:
                return OneWireConfig.model_validate(yaml.safe_load(f) or {})
    return OneWireConfig()
