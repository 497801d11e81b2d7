"""业务核心 - 记录生命周期引擎

核心组件：
- Record / Customer / Appointment: 带字段描述符的业务记录
- ValidationEngine: 两层校验（必填 → 实体规则），只报告第一个错误
- ConflictChecker: 同一顾客的预约时间重叠检查
- EditSession: 一条记录的一次编辑（新建 / 查看 / 编辑）
- RecordTable: 单个实体类型的集合与 CRUD 编排
- EventBus: 跨表格的失效通知

数据流：
    RecordTable.load ──→ 仓库查询 ──→ 用户选择一行 ──→ EditSession（副本）
        ──→ 提交：ValidationEngine ──→ ConflictChecker ──→ 仓库写入
        ──→ 更新集合 ──→ 可能发布事件
"""
from business.conflicts import ConflictChecker
from business.errors import (
    CrossesDayBoundary, DataAccessFailure, EmptyField, OutOfBusinessHours,
    OverlappingAppointment, SchedulingError, StartAfterEnd, ValidationError,
)
from business.events import EventBus, EventKind
from business.records import (
    Appointment, Contact, Country, Customer, Division, Record, User,
)
from business.validation import BusinessHours, ValidationEngine

__all__ = [
    # 记录
    "Record",
    "Customer",
    "Appointment",
    "Contact",
    "User",
    "Country",
    "Division",
    # 校验与冲突
    "BusinessHours",
    "ValidationEngine",
    "ConflictChecker",
    # 事件
    "EventBus",
    "EventKind",
    # 异常
    "SchedulingError",
    "ValidationError",
    "EmptyField",
    "OutOfBusinessHours",
    "StartAfterEnd",
    "CrossesDayBoundary",
    "OverlappingAppointment",
    "DataAccessFailure",
]
