"""编辑会话 - 一条记录的一次编辑。

状态流转::

    OPENED ──open()──→ EDITING ──commit()──→ COMMITTING ──成功──→ CLOSED
                          │  ↑                    │
                          │  └──校验失败/回调拒绝──┘
                          └──cancel()──→ CANCELLED ──→ CLOSED

提交流程：
1. 把表单中的文本字段（去除空白）写入工作副本
2. 调用实体描述符的非文本字段映射（日期选择器 → 时间戳、下拉框 → 引用 id）
3. 执行 ValidationEngine，失败时在表单内显示错误并保持 EDITING
4. 校验通过后以工作副本调用完成回调；回调返回 False（如冲突检查未通过）
   时保持 EDITING，返回 True 时关闭会话

完成回调最多成功触发一次：成功后即清空回调引用，之后的任何调用都是空操作。
"""
from enum import Enum
from typing import Callable, Generic, Optional, TypeVar

from loguru import logger

from interface.base import FormMode, FormSurface

from .descriptors import EntityDescriptor
from .errors import ValidationError
from .records import Record
from .validation import ValidationEngine

R = TypeVar("R", bound=Record)

# 完成回调：接收校验通过的记录（取消时为 None），返回是否可以关闭会话
CompletionCallback = Callable[[Optional[R]], bool]


class SessionState(Enum):
    """编辑会话状态"""
    OPENED = "opened"
    EDITING = "editing"
    COMMITTING = "committing"
    CANCELLED = "cancelled"
    CLOSED = "closed"


class EditSession(Generic[R]):
    """编辑会话

    工作副本由调用方提供，且必须不是表格中显示的那个对象
    （取消时原记录不受任何影响）。

    Attributes:
        descriptor: 实体描述符。
        mode: 表单模式。
        record: 工作副本。
        surface: 表单界面。
        state: 当前状态。
    """

    def __init__(self, descriptor: EntityDescriptor[R], mode: FormMode,
                 record: R, surface: FormSurface,
                 engine: ValidationEngine,
                 callback: Optional[CompletionCallback] = None) -> None:
        self.descriptor = descriptor
        self.mode = mode
        self.record = record
        self.surface = surface
        self.engine = engine
        self._callback = callback
        self.state = SessionState.OPENED

    @property
    def read_only(self) -> bool:
        return self.mode == FormMode.READ

    @property
    def is_closed(self) -> bool:
        return self.state == SessionState.CLOSED

    def open(self) -> "EditSession[R]":
        """把工作副本显示到表单并进入 EDITING 状态。

        Returns:
            self
        """
        if self.state != SessionState.OPENED:
            return self

        if not self.record.is_new:
            self.surface.set_value("id", self.record.id)
        for spec in self.descriptor.text_fields:
            self.surface.set_value(spec.name, spec.getter(self.record))
        self.descriptor.load_form(self.record, self.surface)
        self.surface.set_read_only(self.read_only)

        self.state = SessionState.EDITING
        logger.debug(
            f"打开 {self.descriptor.name} 表单 ({self.mode.value}, id={self.record.id})"
        )
        return self

    def commit(self) -> bool:
        """提交编辑。

        Returns:
            会话是否已关闭（True 表示回调接受了记录）。
        """
        if self.read_only:
            logger.warning(f"{self.descriptor.name} 只读表单不能提交")
            return False
        if self.state != SessionState.EDITING:
            return False

        self.state = SessionState.COMMITTING
        try:
            self._apply_surface()
            self.engine.validate(self.record)
        except ValidationError as err:
            logger.debug(f"{self.descriptor.name} 校验未通过: {err}")
            self.surface.show_error(err)
            self.state = SessionState.EDITING
            return False

        if self._complete(self.record):
            self._close()
            return True

        self.state = SessionState.EDITING
        return False

    def cancel(self) -> None:
        """取消编辑（取消按钮或关闭窗口）。

        以 None 调用完成回调并忽略其返回值，然后无条件关闭。
        已关闭的会话再次取消是空操作。
        """
        if self.state in (SessionState.CANCELLED, SessionState.CLOSED):
            return
        self.state = SessionState.CANCELLED
        self._complete(None)
        self._callback = None
        self._close()

    # 窗口关闭事件与取消按钮走同一条路径
    close = cancel

    def _apply_surface(self) -> None:
        for spec in self.descriptor.text_fields:
            value = self.surface.get_value(spec.name)
            spec.setter(self.record, "" if value is None else str(value).strip())
        try:
            self.descriptor.apply_form(self.surface, self.record)
        except (TypeError, ValueError) as err:
            raise ValidationError(f"invalid form value: {err}") from err

    def _complete(self, record: Optional[R]) -> bool:
        """调用完成回调，成功后清空回调引用，保证幂等。"""
        callback = self._callback
        if callback is None:
            return True
        if callback(record):
            self._callback = None
            return True
        return False

    def _close(self) -> None:
        self.state = SessionState.CLOSED
        self.surface.close()
