"""业务异常定义。

记录生命周期中所有可预期的失败都以异常的形式表达：

- ValidationError 及其子类：字段校验失败（用户可修正，阻止提交）
- OverlappingAppointment：预约时间冲突（用户可修正，会话保持打开）
- DataAccessFailure：数据访问失败（记录日志，以布尔/None 信号返回给调用方）

每个异常都带有 ``code``（以及可选的 ``field``），表现层可据此查找本地化文案。
"""
from typing import Optional


class SchedulingError(Exception):
    """所有业务异常的基类。"""

    code: str = "error"

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field


class ValidationError(SchedulingError):
    """记录校验失败。"""

    code = "validation"


class EmptyField(ValidationError):
    """必填字段为空（文本去除空白后为空，或引用值为 0）。"""

    code = "empty"

    def __init__(self, field: str) -> None:
        super().__init__(f"{field} cannot be empty", field=field)


class OutOfBusinessHours(ValidationError):
    """开始/结束时间不在营业时间内。"""

    code = "out_of_business_hours"

    def __init__(self, field: str) -> None:
        super().__init__(f"{field} must fall within business hours", field=field)


class StartAfterEnd(ValidationError):
    code = "start_after_end"

    def __init__(self) -> None:
        super().__init__("start must not be after end")


class CrossesDayBoundary(ValidationError):
    code = "crosses_day_boundary"

    def __init__(self) -> None:
        super().__init__("start and end must fall on the same day")


class OverlappingAppointment(SchedulingError):
    """同一顾客已有时间重叠的预约。"""

    code = "overlapping"

    def __init__(self) -> None:
        super().__init__("the customer already has an overlapping appointment")


class DataAccessFailure(SchedulingError):
    """数据库访问失败（连接、约束冲突等）。

    Attributes:
        operation: 失败的操作名称，如 ``customers.insert``。
    """

    code = "data_access"

    def __init__(self, operation: str, cause: Optional[BaseException] = None) -> None:
        message = f"{operation} failed"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
        self.operation = operation
        self.cause = cause
