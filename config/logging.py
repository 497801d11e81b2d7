"""日志配置（loguru）

sink 布局：
- 控制台（stderr）：``settings.log_level`` 级别，不含登录记录
- 滚动日志文件：``settings.log_file``，10 MB 滚动，保留 10 份
- 登录记录文件：``settings.login_activity_file``，只接收绑定了
  ``login_activity`` 的日志（见 business.auth）

使用方式：
    from config.logging import setup_logging
    setup_logging()
"""
import sys
from typing import Optional

from loguru import logger

from .settings import settings

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{line} | {message}"
LOGIN_FORMAT = "{extra[attempted_at]} | {extra[username]} | {extra[success]}"


def _is_login_activity(record) -> bool:
    return record["extra"].get("login_activity", False)


def _is_application(record) -> bool:
    return not _is_login_activity(record)


def setup_logging(level: Optional[str] = None,
                  log_file: Optional[str] = None,
                  login_activity_file: Optional[str] = None,
                  console: bool = True) -> None:
    """安装日志 sink（会先移除已有的 sink）。

    Args:
        level: 日志级别，默认 ``settings.log_level``。
        log_file: 应用日志文件，空字符串表示不写文件。
        login_activity_file: 登录记录文件，空字符串表示不写文件。
        console: 是否输出到 stderr。
    """
    level = level or settings.log_level
    log_file = settings.log_file if log_file is None else log_file
    if login_activity_file is None:
        login_activity_file = settings.login_activity_file

    logger.remove()
    if console:
        logger.add(
            sys.stderr,
            format=CONSOLE_FORMAT,
            level=level,
            filter=_is_application,
        )
    if log_file:
        logger.add(
            log_file,
            format=FILE_FORMAT,
            level=level,
            rotation="10 MB",
            retention=10,
            encoding="utf-8",
            filter=_is_application,
        )
    if login_activity_file:
        logger.add(
            login_activity_file,
            format=LOGIN_FORMAT,
            level="INFO",
            encoding="utf-8",
            filter=_is_login_activity,
        )
