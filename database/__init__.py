"""数据访问层 - SQLAlchemy 实现的记录仓库

使用示例：
    ```python
    from database import DatabaseManager

    db = DatabaseManager("sqlite:///data/scheduler.db")
    db.create_tables()
    customers = db.customers.select()
    ```
"""
from database.manager import DatabaseManager

__all__ = ["DatabaseManager"]
