"""表现层抽象 - 核心层消费的界面协议

定义表单（FormSurface）与表现层（Presenter）的抽象基类。
核心层（EditSession、RecordTable）只依赖这里的接口，不关心具体界面技术
（终端、桌面窗口、测试替身都可以实现它们）。

核心概念：
- FormMode: 表单打开模式（新建 / 查看 / 编辑）
- FormSurface: 一个打开的表单，按字段名读写控件值，可整体切换只读
- Presenter: 打开表单、显示错误与提示信息

设计原则：
- 表现层只负责显示和收集字段值
- 校验、冲突检查、持久化完全由核心层处理
- 表单控件与记录字段同名，非文本字段（日期选择器、下拉框）由实体描述符映射
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class FormMode(Enum):
    """表单模式"""
    CREATE = "create"   # 新建：空白记录
    READ = "read"       # 查看：全部字段禁用，不可提交
    UPDATE = "update"   # 编辑：记录副本预填


@dataclass
class Notice:
    """一条显示给用户的提示

    Attributes:
        title: 标题
        message: 正文
        is_error: 是否为错误提示
        timestamp: 产生时间
    """
    title: str
    message: str
    is_error: bool = False
    timestamp: datetime = field(default_factory=datetime.now)


class FormSurface(ABC):
    """表单抽象基类

    一个 FormSurface 对应一次 EditSession 的界面，
    字段名与记录字段描述符的名称一致（如 ``name``、``start_date``）。
    """

    def __init__(self, entity: str, mode: FormMode, title: str = ""):
        """
        Args:
            entity: 实体名称（如 'customer', 'appointment'）
            mode: 表单模式
            title: 窗口标题
        """
        self.entity = entity
        self.mode = mode
        self.title = title
        self.read_only = mode == FormMode.READ
        self.is_open = True

    @abstractmethod
    def get_value(self, name: str) -> Any:
        """读取控件值

        Args:
            name: 字段名

        Returns:
            控件当前值（文本为 str，选择器为 id / date / int），未填写返回 None
        """
        pass

    @abstractmethod
    def set_value(self, name: str, value: Any):
        """设置控件值

        Args:
            name: 字段名
            value: 要显示的值
        """
        pass

    @abstractmethod
    def show_error(self, error: Exception):
        """在表单内显示错误（表单保持打开）"""
        pass

    def set_read_only(self, read_only: bool):
        """整体切换只读状态"""
        self.read_only = read_only

    def close(self):
        """关闭表单窗口"""
        self.is_open = False


class Presenter(ABC):
    """表现层抽象基类

    Presenter 的职责：
    1. 为记录表格打开指定模式的表单
    2. 显示数据访问失败等全局错误
    3. 显示删除成功等提示信息
    """

    @abstractmethod
    def open_form(self, entity: str, mode: FormMode, title: str) -> FormSurface:
        """打开一个表单

        Args:
            entity: 实体名称
            mode: 表单模式
            title: 窗口标题

        Returns:
            新打开的表单
        """
        pass

    @abstractmethod
    def show_error(self, error: Exception):
        """显示错误"""
        pass

    @abstractmethod
    def show_info(self, title: str, message: str):
        """显示提示信息"""
        pass


class MemoryForm(FormSurface):
    """内存表单：值保存在字典中，用于无界面运行（脚本、示例、测试）"""

    def __init__(self, entity: str, mode: FormMode, title: str = ""):
        super().__init__(entity, mode, title)
        self.values: Dict[str, Any] = {}
        self.errors: List[Exception] = []

    def get_value(self, name: str) -> Any:
        return self.values.get(name)

    def set_value(self, name: str, value: Any):
        self.values[name] = value

    def fill(self, **values: Any) -> "MemoryForm":
        """模拟用户输入多个字段"""
        self.values.update(values)
        return self

    def show_error(self, error: Exception):
        self.errors.append(error)

    @property
    def last_error(self) -> Optional[Exception]:
        return self.errors[-1] if self.errors else None


class MemoryPresenter(Presenter):
    """内存表现层：记录所有打开的表单和提示"""

    def __init__(self):
        self.forms: List[MemoryForm] = []
        self.notices: List[Notice] = []

    def open_form(self, entity: str, mode: FormMode, title: str) -> MemoryForm:
        form = MemoryForm(entity, mode, title)
        self.forms.append(form)
        return form

    def show_error(self, error: Exception):
        self.notices.append(Notice(type(error).__name__, str(error), is_error=True))

    def show_info(self, title: str, message: str):
        self.notices.append(Notice(title, message))

    @property
    def last_form(self) -> Optional[MemoryForm]:
        return self.forms[-1] if self.forms else None

    @property
    def errors(self) -> List[Notice]:
        return [n for n in self.notices if n.is_error]
