"""用户接口模块 - 表现层协议与实现

核心层（business）只依赖 interface.base 中的抽象接口：

- FormSurface: 一个打开的表单，按字段名读写控件值，可整体切换只读
- Presenter: 打开表单、显示错误与提示
- FormMode: 新建 / 查看 / 编辑

实现：
- MemoryForm / MemoryPresenter: 无界面运行（脚本、测试）
- interface.terminal: 终端交互界面
- interface.manager.TabManager: 按需构建并重新加载各实体的表格

架构设计：
    用户 ──→ Presenter/FormSurface ──→ EditSession ──→ RecordTable ──→ 数据库
    (终端)         (字段值)            (校验/冲突)      (持久化)

interface.manager 与 interface.terminal 依赖 business 包，需要显式导入。
"""
from interface.base import (
    FormMode, FormSurface, MemoryForm, MemoryPresenter, Notice, Presenter,
)

__all__ = [
    "FormMode",
    "FormSurface",
    "Presenter",
    "Notice",
    "MemoryForm",
    "MemoryPresenter",
]
