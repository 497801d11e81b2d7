"""预约筛选条件。

按「年 + 月」或「年 + 周」筛选预约表格。筛选在显示时区下计算，
转换为 UTC 的半开区间 ``[lower, upper)`` 后交给仓库查询，不依赖具体 SQL 方言。
周采用 ISO 周（周一开始，1–53）。
"""
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple


class Period(Enum):
    """筛选粒度"""
    MONTH = "month"
    WEEK = "week"


@dataclass(frozen=True)
class AppointmentFilter:
    """预约筛选条件

    Attributes:
        year: 年份。
        period: 月或周。
        value: 月份（1–12）或 ISO 周序号（1–53）。
        tz: 显示时区，决定一天从何时开始（默认 UTC）。
    """
    year: int
    period: Period
    value: int
    tz: tzinfo = field(default=timezone.utc, compare=False)

    def __post_init__(self):
        if self.period == Period.MONTH and not 1 <= self.value <= 12:
            raise ValueError(f"Invalid month: {self.value}")
        if self.period == Period.WEEK:
            # fromisocalendar 会拒绝当年不存在的第 53 周
            date.fromisocalendar(self.year, self.value, 1)

    def date_range(self) -> Tuple[date, date]:
        """返回显示时区下的日期半开区间 [first, last)。"""
        if self.period == Period.MONTH:
            first = date(self.year, self.value, 1)
            if self.value == 12:
                return first, date(self.year + 1, 1, 1)
            return first, date(self.year, self.value + 1, 1)
        first = date.fromisocalendar(self.year, self.value, 1)
        return first, first + timedelta(days=7)

    def utc_range(self, tz: Optional[tzinfo] = None) -> Tuple[datetime, datetime]:
        """返回 UTC 时间的半开区间 [lower, upper)。

        Args:
            tz: 显示时区，缺省使用筛选条件自带的时区。
        """
        tz = tz or self.tz
        first, last = self.date_range()
        lower = datetime.combine(first, time(0), tzinfo=tz).astimezone(timezone.utc)
        upper = datetime.combine(last, time(0), tzinfo=tz).astimezone(timezone.utc)
        return lower, upper

    def describe(self) -> str:
        if self.period == Period.MONTH:
            return f"{self.year}-{self.value:02d}"
        return f"{self.year}-W{self.value:02d}"


def filter_options(starts: Iterable[datetime], tz: tzinfo
                   ) -> Dict[int, Dict[Period, List[int]]]:
    """根据已有预约的开始时间，列出可选的年份及其中的月份/周。

    Args:
        starts: 预约开始时间（带时区）。
        tz: 显示时区。

    Returns:
        ``{年份: {Period.MONTH: [月份...], Period.WEEK: [周...]}}``，均已排序。
    """
    months = defaultdict(set)
    weeks = defaultdict(set)
    for start in starts:
        local = start.astimezone(tz)
        months[local.year].add(local.month)
        iso_year, iso_week, _ = local.isocalendar()
        weeks[iso_year].add(iso_week)

    return {
        year: {
            Period.MONTH: sorted(months.get(year, ())),
            Period.WEEK: sorted(weeks.get(year, ())),
        }
        for year in sorted(set(months) | set(weeks))
    }
