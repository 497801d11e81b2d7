"""全局配置管理

所有用户可配置项均通过 .env 文件设置，运行时自动加载到此处。

使用方式：
    1. 运行 python scripts/setup_env.py 生成 .env 文件
    2. 或手动创建 .env 文件 / 设置同名环境变量
"""
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """应用配置 - 所有字段均可通过 .env 或环境变量覆盖"""

    # ========== 数据库 ==========
    database_url: str = "sqlite:///data/scheduler.db"

    # ========== 营业时间 ==========
    # 营业时间与同日规则都按该时区判断，与存储时区（UTC）、显示时区无关
    business_timezone: str = "US/Eastern"
    business_open_hour: int = 8
    business_close_hour: int = 22

    # ========== 显示 ==========
    # 留空表示使用本机时区
    display_timezone: str = ""
    # 登录后提示多少分钟内即将开始的预约
    upcoming_window_minutes: int = 15

    # ========== 日志 ==========
    log_level: str = "INFO"
    log_file: str = "logs/scheduler.log"
    login_activity_file: str = "login_activity.txt"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


# 全局配置实例
settings = Settings()
