# watermarker/log.py
import logging
import os

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
LOG_LEVEL_ENV = "WATERMARKER_LOG_LEVEL"


def configure_logging(level=None):
    """配置根 logger;未指定级别时读取环境变量 WATERMARKER_LOG_LEVEL,默认 INFO"""
    level = level or os.getenv(LOG_LEVEL_ENV, "INFO")
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format=LOG_FORMAT,
    )
