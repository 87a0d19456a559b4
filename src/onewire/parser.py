"""Interpretation of the two lines produced by a w1_therm read cycle.

A read of ``w1_slave`` yields, e.g.::

    72 01 4b 46 7f ff 0e 10 57 : crc=57 YES
    72 01 4b 46 7f ff 0e 10 57 t=23125

Each line starts with a dump of the scratchpad bytes. Once those are removed,
the first line carries the driver's CRC verdict and the second the reading in
millidegrees Celsius.
"""
from __future__ import annotations
import re

ZERO_K = -273.15  # no sensor can report this, used as the error value

_HEX_TOKEN = re.compile(r'[0-9a-fA-F]{2} ')
_VALUE = re.compile(r't=(-?\d+)$')

def hex_clean(line: str) -> str:
    return _HEX_TOKEN.sub('', line)

def status_ok(line: str) -> bool:
    """True when the driver reports a good CRC for this cycle."""
    return 'YES' in hex_clean(line)

def parse_value(line: str) -> float:
    m = _VALUE.search(hex_clean(line.strip()).strip())
    if not m:
        return ZERO_K
    return int(m.group(1)) / 1000.0

def parse_reading(status: str, value: str) -> float:
    if not status_ok(status):
        return ZERO_K
    return parse_value(value)

def is_error(temp: float) -> bool:
    return temp == ZERO_K
