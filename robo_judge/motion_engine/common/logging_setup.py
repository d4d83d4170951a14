# robo_judge/motion_engine/common/logging_setup.py
import logging
from .enums import LogLevel

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

def configure_logging(config: dict) -> LogLevel:
    """Applies the `logging` section of the configuration to the root logger."""
    level = LogLevel(str(config.get('level', LogLevel.INFO.value)).upper())
    logging.basicConfig(level=getattr(logging, level.value), format=LOG_FORMAT)
    return level
