#main.py

"""
pathmonitor - run the filesystem monitor from a config file
"""
import sys
import asyncio
import logging
from pathlib import Path

from pathmonitor.utils.config import Config, load_config
from pathmonitor.utils.logger import setup_logging
from pathmonitor.watch import (
    CoordinatorEventHandler,
    DirectoryWatcher,
    EventType,
    MonitorCoordinator,
    PatternFilter,
)

logger = logging.getLogger(__name__)


def log_change(event_type: EventType):
    """Callback factory: log every matched event"""
    def callback(path: Path):
        logger.info(f"{event_type.value}: {path}")
    return callback


def build_monitor(config: Config) -> MonitorCoordinator:
    """Wire coordinator, handler and watcher from config"""
    coordinator = MonitorCoordinator.from_config(config.monitor)

    if config.watch.enabled:
        handler = CoordinatorEventHandler(
            coordinator,
            pattern_filter=PatternFilter(config.watch.ignore_patterns),
        )
        coordinator.attach_watch_source(DirectoryWatcher.from_config(config.watch, handler))

    return coordinator


async def main(config_path: str = None):
    """Main entry point"""
    config = load_config(config_path)
    setup_logging(config.log_level, config.log_file, config.log_format)

    monitor = build_monitor(config)
    await monitor.start()

    try:
        for target in config.targets:
            if not target.path.exists():
                logger.warning(f"Skipping missing watch target: {target.path}")
                continue
            for name in target.events:
                event_type = EventType.parse(name)
                await monitor.register_callback(
                    event_type, target.path, log_change(event_type), recursive=target.recursive
                )

        if not config.targets:
            logger.warning("No watch targets configured; nothing will be reported")

        logger.info("pathmonitor is running. Press Ctrl+C to stop.")
        while True:
            await asyncio.sleep(1)

    except asyncio.CancelledError:
        pass

    finally:
        await monitor.stop()


if __name__ == "__main__":
    try:
        asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else None))
    except KeyboardInterrupt:
        print("\nShutting down...")
