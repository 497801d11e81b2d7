#!/usr/bin/env python3
"""预约排程 - 终端应用入口

启动流程：
1. 配置日志、连接数据库（自动建表）
2. 操作员登录（最多 3 次），记录每次登录尝试
3. 提示该用户即将开始的预约
4. 进入终端交互循环（顾客 / 预约 / 报表）

使用方式：
    python app.py

    # 指定数据库
    python app.py --db sqlite:///data/scheduler.db

    # 非交互登录
    python app.py --user test --password test

环境变量（在 .env 文件中配置，运行 python scripts/setup_env.py 生成）：
    DATABASE_URL            数据库连接地址
    BUSINESS_TIMEZONE       营业时区（默认 US/Eastern）
    DISPLAY_TIMEZONE        显示时区（默认本机时区）
    LOG_LEVEL               日志级别（默认 INFO）
"""
import argparse
import getpass
import sys

from loguru import logger

MAX_LOGIN_ATTEMPTS = 3


def login(service, presenter, username=None, password=None):
    """交互式登录，返回登录成功的用户或 None"""
    for _ in range(MAX_LOGIN_ATTEMPTS):
        name = username if username is not None else presenter.ask("Username: ")
        secret = password if password is not None else getpass.getpass("Password: ")
        user = service.authenticate(name, secret)
        if user is not None:
            return user
        presenter.output("❌ Username or password is incorrect.")
        if username is not None and password is not None:
            break
        username = password = None
    return None


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="预约排程终端应用")
    parser.add_argument("--db", default=None, help="数据库连接 URL")
    parser.add_argument("--user", default=None, help="登录用户名")
    parser.add_argument("--password", default=None, help="登录密码")
    parser.add_argument("--log-level", default=None, help="日志级别")
    args = parser.parse_args(argv)

    from config.logging import setup_logging
    from config.settings import settings

    setup_logging(level=args.log_level)

    from business.auth import LoginService
    from business.context import AppContext, build_descriptors
    from database import DatabaseManager
    from interface.manager import TabManager
    from interface.terminal import TerminalConsole, TerminalPresenter

    db = None
    try:
        db = DatabaseManager(args.db)
        db.create_tables()
        logger.info(f"数据库已连接: {db.database_url}")

        presenter = TerminalPresenter()
        context = AppContext(settings, db, presenter)

        service = LoginService(
            db.users, db.appointments, settings.upcoming_window_minutes
        )
        user = login(service, presenter, args.user, args.password)
        if user is None:
            logger.warning("登录失败次数过多，退出")
            return 1

        context.sign_in(user)
        presenter.show_info(
            "Upcoming", service.upcoming_notice(user, context.display_tz)
        )

        tabs = TabManager(context, build_descriptors(context))
        TerminalConsole(context, tabs).run()
        return 0
    except KeyboardInterrupt:
        logger.info("收到键盘中断信号")
        return 130
    finally:
        if db is not None:
            db.close()
        logger.info("已退出")


if __name__ == "__main__":
    sys.exit(main())
