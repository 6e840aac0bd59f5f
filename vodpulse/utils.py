import logging
import os
import sys
from typing import Optional


def normalize_log_level(level: str) -> int:
    if isinstance(level, int):
        return level
    text = str(level or "INFO").strip().upper()
    value = getattr(logging, text, None)
    if not isinstance(value, int):
        raise ValueError(f"Unsupported log level: {level}")
    return value


def get_base_path():
    """Get the path where the application is running (as script or as binary)."""
    if getattr(sys, 'frozen', False):
        return os.path.dirname(sys.executable)
    return os.getcwd()


def get_logs_path():
    base = get_base_path()
    logs_dir = os.path.join(base, 'logs')
    os.makedirs(logs_dir, exist_ok=True)
    return os.path.join(logs_dir, 'vodpulse.log')


def initialize_logger(force: bool = False, level: str = "INFO",
                      log_file_path: Optional[str] = None, stream=None):
    root_logger = logging.getLogger()
    if root_logger.handlers and not force:
        return

    log_file = log_file_path or get_logs_path()
    logging.basicConfig(
        level=normalize_log_level(level),
        format='%(asctime)s [%(levelname)s]: %(message)s',
        datefmt='%H:%M:%S',
        handlers=[
            logging.FileHandler(log_file, encoding='utf-8'),
            logging.StreamHandler(stream),
        ],
        force=force,
    )


def format_elapsed(seconds: float) -> str:
    seconds = max(int(seconds), 0)
    h = seconds // 3600
    m = (seconds % 3600) // 60
    s = seconds % 60
    return f"{h:02d}:{m:02d}:{s:02d}"
