import logging
import os
import time
from datetime import datetime
from typing import Optional


def setup_logging(log_level: str = 'INFO', log_file: Optional[str] = None, log_to_file: bool = True):
    """
    Setup logging configuration

    Args:
        log_level: Logging level ('DEBUG', 'INFO', 'WARNING', 'ERROR')
        log_file: Optional log file path
        log_to_file: Whether to add a file handler at all
    """
    # Configure logging format
    log_format = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

    # Setup handlers
    handlers = [logging.StreamHandler()]  # Console handler

    if log_file:
        handlers.append(logging.FileHandler(log_file))
    elif log_to_file:
        # Default log file with timestamp
        os.makedirs('logs', exist_ok=True)
        timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        handlers.append(logging.FileHandler(f'logs/stock_charts_{timestamp}.log'))

    # Configure logging
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format=log_format,
        handlers=handlers,
        force=True
    )

    # Set specific logger levels
    logging.getLogger('matplotlib').setLevel(logging.WARNING)
    logging.getLogger('PIL').setLevel(logging.WARNING)
    logging.getLogger('urllib3').setLevel(logging.WARNING)
    logging.getLogger('yfinance').setLevel(logging.WARNING)


class Timer:
    """Simple timer context manager for performance monitoring"""

    def __init__(self, description: str = "Operation"):
        self.description = description
        self.start_time = None
        self.elapsed = 0.0

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.elapsed = time.perf_counter() - self.start_time
        logger = logging.getLogger(__name__)
        logger.debug(f"{self.description} completed in {self.elapsed:.2f} seconds")
