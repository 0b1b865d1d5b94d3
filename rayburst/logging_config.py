"""
logging_config.py

配置 'rayburst' 命名空间的日志输出。各模块使用 logging.getLogger(__name__)。
"""
import logging
import sys
from typing import Optional


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> None:
    """
    配置 'rayburst' 根日志器。

    参数:
      - level: 日志级别 (logging.DEBUG / logging.INFO ...)
      - log_file: 可选，同时写入该文件
    """
    logger = logging.getLogger("rayburst")
    logger.setLevel(level)

    # 重复调用时避免叠加 handler
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.debug("日志已初始化")
