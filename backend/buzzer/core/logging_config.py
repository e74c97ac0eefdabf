"""
日志配置
"""

import logging
from logging import Logger

from buzzer.core.config import settings


def configure_logging(level: str = None) -> Logger:
    """配置根日志并返回应用日志器"""
    logging.basicConfig(
        level=getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    return logging.getLogger("buzzer")
