"""标签页管理器 - 按需构建记录表格

每个标签页对应一个实体的 RecordTable。表格在第一次激活时才构建并加载，
之后每次重新激活都会重新加载（看到其他操作员的修改）。
所有表格共享上下文中的同一个 EventBus，订阅关系在构建表格时建立。
"""
from typing import Dict, Iterable, List, Mapping, Optional

from loguru import logger

from business.context import AppContext
from business.descriptors import EntityDescriptor
from business.events import EventKind
from business.table import RecordTable

# 表格需要在哪些事件发生后重新加载
DEFAULT_RELOAD_ON: Mapping[str, Iterable[EventKind]] = {
    "appointment": (EventKind.CUSTOMER_DELETED,),
}


class TabManager:
    """标签页管理器

    使用方式：
        ```python
        tabs = TabManager(context, build_descriptors(context))
        customers = tabs.activate("customer")
        customers.add()
        ```
    """

    def __init__(self, context: AppContext,
                 descriptors: Mapping[str, EntityDescriptor],
                 reload_on: Optional[Mapping[str, Iterable[EventKind]]] = None):
        """
        Args:
            context: 应用上下文
            descriptors: ``{标签名: 实体描述符}``
            reload_on: ``{标签名: 触发重新加载的事件}``，默认预约表格在删除顾客后重新加载
        """
        self.context = context
        self.descriptors = dict(descriptors)
        self.reload_on = DEFAULT_RELOAD_ON if reload_on is None else reload_on
        self.tables: Dict[str, RecordTable] = {}

    def _build(self, name: str) -> RecordTable:
        descriptor = self.descriptors[name]
        table = RecordTable(
            descriptor,
            self.context.presenter,
            self.context.engine,
            self.context.bus,
        )
        for kind in self.reload_on.get(name, ()):
            self.context.bus.subscribe(kind, table.load)
        logger.info(f"标签页已构建: {name}")
        return table

    def activate(self, name: str) -> RecordTable:
        """激活标签页：首次激活时构建表格，每次激活都重新加载

        Args:
            name: 标签名

        Returns:
            该标签页的表格

        Raises:
            KeyError: 未知标签名
        """
        if name not in self.descriptors:
            raise KeyError(f"Unknown tab: {name}")
        table = self.tables.get(name)
        if table is None:
            table = self._build(name)
            self.tables[name] = table
        table.load()
        return table

    def get_table(self, name: str) -> Optional[RecordTable]:
        """获取已构建的表格（未激活过返回 None）"""
        return self.tables.get(name)

    def list_tabs(self) -> List[str]:
        """列出所有标签名"""
        return list(self.descriptors.keys())

    def loaded_tabs(self) -> List[str]:
        """列出已构建的标签名"""
        return list(self.tables.keys())
