#!/usr/bin/env python3
"""交互式生成 .env 配置文件

使用方式：
    python scripts/setup_env.py

按分组提示每个配置项，默认值取自 config.settings.Settings。
写入前用 Settings 校验整数字段，并检查时区名称是否有效。
"""
import os
import sys
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from pydantic import ValidationError

from config.settings import Settings

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
ENV_FILE = os.path.join(PROJECT_ROOT, ".env")

# (分组标题, [(字段名, 描述), ...])
SECTIONS = [
    ("数据库", [
        ("database_url", "数据库连接地址"),
    ]),
    ("营业时间", [
        ("business_timezone", "营业时区（IANA 名称）"),
        ("business_open_hour", "开门整点"),
        ("business_close_hour", "关门整点"),
    ]),
    ("显示", [
        ("display_timezone", "显示时区（留空使用本机时区）"),
        ("upcoming_window_minutes", "登录时提示多少分钟内开始的预约"),
    ]),
    ("日志", [
        ("log_level", "日志级别"),
        ("log_file", "日志文件（留空不写文件）"),
        ("login_activity_file", "登录记录文件"),
    ]),
]

TIMEZONE_FIELDS = ("business_timezone", "display_timezone")


def default_for(name: str) -> str:
    value = Settings.model_fields[name].default
    return "" if value is None else str(value)


def check_value(name: str, value: str) -> str:
    """校验单个配置值，返回错误信息（合法时返回空字符串）"""
    if name in TIMEZONE_FIELDS and value:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError):
            return f"未知时区: {value}"
    try:
        Settings(_env_file=None, **{name: value})
    except ValidationError as e:
        return e.errors()[0]["msg"]
    return ""


def prompt_value(name: str, desc: str) -> str:
    default = default_for(name)
    hint = f" (默认: {default})" if default else ""
    print(f"📝 {desc}")
    while True:
        value = input(f"  {name.upper()}{hint}: ").strip() or default
        error = check_value(name, value)
        if not error:
            return value
        print(f"  ❌ {error}")


def main():
    print()
    print("=" * 60)
    print("  预约排程 配置向导")
    print("=" * 60)
    print()

    if os.path.exists(ENV_FILE):
        print(f"⚠️  检测到已有 .env 文件: {ENV_FILE}")
        if input("是否覆盖？(y/N): ").strip().lower() != "y":
            print("已取消。")
            return
        print()

    values = {}
    for title, items in SECTIONS:
        print(f"--- {title} ---")
        for name, desc in items:
            values[name] = prompt_value(name, desc)
        print()

    settings = Settings(_env_file=None, **values)
    if settings.business_open_hour >= settings.business_close_hour:
        print("❌ 开门时间必须早于关门时间，未写入配置。")
        return

    lines = ["# 预约排程 配置文件", "# 由 scripts/setup_env.py 生成"]
    for title, items in SECTIONS:
        lines.append("")
        lines.append(f"# === {title} ===")
        lines.extend(f"{name.upper()}={values[name]}" for name, _ in items)

    with open(ENV_FILE, "w", encoding="utf-8") as f:
        f.write("\n".join(lines) + "\n")

    print("=" * 60)
    print(f"  ✅ 配置文件已生成: {ENV_FILE}")
    print()
    print("  首次运行请先初始化数据库：")
    print("    python scripts/init_db.py")
    print("  然后启动应用：")
    print("    python app.py")
    print("=" * 60)


if __name__ == "__main__":
    main()
