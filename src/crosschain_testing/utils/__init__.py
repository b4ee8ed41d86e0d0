from .logger import Logging, LogConfig, logs

__all__ = ["Logging", "LogConfig", "logs"]
