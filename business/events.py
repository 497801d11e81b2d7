"""进程内事件总线 - 用于跨表格的缓存失效通知

同步、单线程、按订阅顺序依次调用处理函数。
目前只用于：删除顾客后通知预约表格重新加载，去掉已级联删除的预约行，
而两个表格之间不需要直接依赖。
"""
from collections import defaultdict
from enum import Enum
from typing import Callable, Dict, List

from loguru import logger

EventHandler = Callable[[], None]


class EventKind(Enum):
    """事件类型"""
    CUSTOMER_DELETED = "customer_deleted"
    APPOINTMENT_DELETED = "appointment_deleted"


class EventBus:
    """事件总线

    使用方式：
        ```python
        bus = EventBus()
        bus.subscribe(EventKind.CUSTOMER_DELETED, appointment_table.load)
        bus.publish(EventKind.CUSTOMER_DELETED)
        ```
    """

    def __init__(self) -> None:
        self._handlers: Dict[EventKind, List[EventHandler]] = defaultdict(list)

    def subscribe(self, kind: EventKind, handler: EventHandler) -> None:
        """注册事件处理函数

        Args:
            kind: 事件类型
            handler: 无参回调
        """
        # 重复订阅只保留一次
        if handler not in self._handlers[kind]:
            self._handlers[kind].append(handler)

    def unsubscribe(self, kind: EventKind, handler: EventHandler) -> None:
        if handler in self._handlers.get(kind, []):
            self._handlers[kind].remove(handler)

    def publish(self, kind: EventKind) -> int:
        """发布事件，依次同步调用所有处理函数

        Args:
            kind: 事件类型

        Returns:
            被调用的处理函数数量
        """
        handlers = list(self._handlers.get(kind, []))
        logger.debug(f"发布事件 {kind.value}，订阅者 {len(handlers)} 个")
        for handler in handlers:
            handler()
        return len(handlers)

    def subscriber_count(self, kind: EventKind) -> int:
        return len(self._handlers.get(kind, []))
