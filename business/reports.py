"""报表。

三张报表，均返回普通数据结构，由表现层负责渲染：

1. 预约数量：按月份统计、按类型统计（两张独立的汇总）
2. 每个联系人的预约日程
3. 按一级行政区统计顾客数量

月份按显示时区计算。汇总函数只处理内存中的记录，不依赖 SQL 方言；
ReportService 负责从仓库读取数据。
"""
from collections import Counter
from dataclasses import dataclass
from datetime import tzinfo
from typing import Dict, Iterable, List, Tuple

from .records import Appointment, Contact, Country, Customer, Division


@dataclass(frozen=True)
class MonthCount:
    """某月的预约数量"""
    month: str      # YYYY-MM
    count: int


@dataclass(frozen=True)
class TypeCount:
    """某类型的预约数量"""
    type: str
    count: int


@dataclass(frozen=True)
class DivisionCount:
    """某行政区的顾客数量"""
    country: str
    division: str
    count: int


def count_by_month(appointments: Iterable[Appointment],
                   tz: tzinfo) -> List[MonthCount]:
    """按月份（显示时区）统计预约数量，按月份排序。"""
    counter = Counter(
        appointment.start.astimezone(tz).strftime("%Y-%m")
        for appointment in appointments
    )
    return [MonthCount(month, count) for month, count in sorted(counter.items())]


def count_by_type(appointments: Iterable[Appointment]) -> List[TypeCount]:
    """按类型统计预约数量，按类型排序。"""
    counter = Counter(appointment.type for appointment in appointments)
    return [TypeCount(kind, count) for kind, count in sorted(counter.items())]


def schedule_by_contact(contacts: Iterable[Contact],
                        appointments: Iterable[Appointment]
                        ) -> List[Tuple[Contact, List[Appointment]]]:
    """每个联系人的预约，按开始时间排序；没有预约的联系人对应空列表。

    Returns:
        ``[(联系人, [预约...]), ...]``，保持联系人的输入顺序。
    """
    schedule: Dict[int, List[Appointment]] = {}
    for appointment in appointments:
        schedule.setdefault(appointment.contact_id, []).append(appointment)
    return [
        (contact, sorted(schedule.get(contact.id, []), key=lambda a: a.start))
        for contact in contacts
    ]


def customers_by_division(customers: Iterable[Customer],
                          divisions: Iterable[Division],
                          countries: Iterable[Country]) -> List[DivisionCount]:
    """统计每个行政区的顾客数量（只列出有顾客的行政区）。"""
    country_names = {country.id: country.country for country in countries}
    division_index = {division.id: division for division in divisions}
    counter = Counter(customer.division_id for customer in customers)

    rows = []
    for division_id, count in counter.items():
        division = division_index.get(division_id)
        if division is None:
            rows.append(DivisionCount("", f"#{division_id}", count))
            continue
        rows.append(DivisionCount(
            country_names.get(division.country_id, ""),
            division.division,
            count,
        ))
    return sorted(rows, key=lambda row: (row.country, row.division))


class ReportService:
    """从数据库读取数据并生成报表。

    仓库查询失败时抛出 DataAccessFailure，由调用方显示错误。

    Attributes:
        db: DatabaseManager。
        tz: 显示时区。
    """

    def __init__(self, db, tz: tzinfo) -> None:
        self.db = db
        self.tz = tz

    def counts_by_month(self) -> List[MonthCount]:
        return count_by_month(self.db.appointments.select(), self.tz)

    def counts_by_type(self) -> List[TypeCount]:
        return count_by_type(self.db.appointments.select())

    def contact_schedules(self) -> List[Tuple[Contact, List[Appointment]]]:
        return schedule_by_contact(
            self.db.contacts.select(), self.db.appointments.select()
        )

    def customer_divisions(self) -> List[DivisionCount]:
        return customers_by_division(
            self.db.customers.select(),
            self.db.divisions.select(),
            self.db.countries.select(),
        )
