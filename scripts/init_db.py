"""初始化数据库"""
import sys
import os

# 添加项目根目录到路径
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from business.auth import hash_password
from database import DatabaseManager
from config.business_config import SeedConfig, seed_config
from loguru import logger


def init_database(db: DatabaseManager = None, config: SeedConfig = None) -> DatabaseManager:
    """初始化数据库和种子数据（可重复执行，已有数据不会重复插入）

    Args:
        db: 数据库管理器，默认按 settings 创建
        config: 种子数据配置，默认使用 seed_config

    Returns:
        数据库管理器
    """
    logger.info("Initializing database...")
    db = db or DatabaseManager()
    config = config or seed_config

    # 创建所有表
    logger.info("Creating tables...")
    db.create_tables()

    logger.info("Inserting seed data...")
    divisions = config.get_divisions()
    for country in config.get_countries():
        country_id = db.countries.get_or_create(country)
        for division in divisions.get(country, []):
            db.divisions.get_or_create(division, country_id)
        logger.info(f"Created country: {country}")

    for contact in config.get_contacts():
        db.contacts.get_or_create(contact["name"], contact["email"])
        logger.info(f"Created contact: {contact['name']}")

    for user in config.get_users():
        db.users.get_or_create(user["name"], hash_password(user["password"]))
        logger.info(f"Created user: {user['name']}")

    logger.info("Database initialization completed!")
    return db


if __name__ == "__main__":
    init_database()
