import os, sys, asyncio, signal, logging
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))
from onewire.config import load_config
from onewire.logging_config import setup_logging, logging_settings
from onewire.scheduler import AsyncioScheduler
from onewire.sinks import BoundValue
from onewire.w1 import OneWire

log = logging.getLogger("onewire.app")

async def run(cfg) -> int:
    w1 = OneWire(cfg, AsyncioScheduler())
    log.info("Known devices: %s", w1.devices())
    sensors = w1.devices("28")
    log.info("Known DS18B20: %s", sensors)
    for dev in sensors:
        log.info("Temperature at %s is %.3f", dev, w1.temperature(dev))
    if not sensors:
        return 1

    temp = BoundValue()
    temp.add_listener(lambda v: log.info("Temperature at %s set to %.3f", sensors[0], v))
    binding = w1.bind(sensors[0], temp)

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop.set)
    await stop.wait()
    binding.cancel()
    log.info("Last temperature at %s was %.3f", sensors[0], temp.get())
    return 0

def main():
    cfg = load_config(sys.argv[1] if len(sys.argv) > 1 else None)
    setup_logging(logging_settings(cfg))
    return asyncio.run(run(cfg))

if __name__ == "__main__":
    sys.exit(main())
