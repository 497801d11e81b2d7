"""终端界面 - 命令行中的表现层实现

提供基于 stdin/stdout 的表单与交互循环，实现 interface.base 中的
FormSurface / Presenter 协议。输入输出函数可以替换，便于脚本化测试。

使用方式：
    ```python
    presenter = TerminalPresenter()
    context = AppContext(settings, db, presenter)
    console = TerminalConsole(context, TabManager(context, build_descriptors(context)))
    console.run()
    ```

命令：
    c / customers      打开顾客标签页
    a / appointments   打开预约标签页
    r / reports        查看报表
    q / quit           退出

标签页内：
    list | add | view <id> | edit <id> | delete <id> | back
    filter month <年> <月> | filter week <年> <周> | filter clear | filter options
"""
from typing import Any, Callable, Dict, List, Optional

from loguru import logger

from business.context import AppContext
from business.errors import DataAccessFailure
from business.filters import AppointmentFilter, Period
from business.reports import ReportService
from business.session import EditSession
from business.table import RecordTable
from interface.base import FormMode, FormSurface, Presenter
from interface.manager import TabManager

InputFunc = Callable[[str], str]
OutputFunc = Callable[[str], None]

EXIT_COMMANDS = ("quit", "exit", "q")


class TerminalPresenter(Presenter):
    """终端表现层"""

    def __init__(self, input_func: InputFunc = input,
                 output: OutputFunc = print):
        """
        Args:
            input_func: 读取一行输入（默认 input）
            output: 输出一行文本（默认 print）
        """
        self.input_func = input_func
        self.output = output

    def ask(self, prompt: str) -> str:
        return self.input_func(prompt).strip()

    def open_form(self, entity: str, mode: FormMode, title: str) -> "TerminalForm":
        self.output(f"\n=== {title} ===")
        return TerminalForm(entity, mode, title, self)

    def show_error(self, error: Exception):
        self.output(f"❌ {error}")

    def show_info(self, title: str, message: str):
        self.output(f"ℹ️  {title}: {message}")


class TerminalForm(FormSurface):
    """终端表单

    字段值保存在字典中。``prompt_fields`` 逐个字段提示输入，
    直接回车保留当前值。
    """

    def __init__(self, entity: str, mode: FormMode, title: str,
                 presenter: TerminalPresenter):
        super().__init__(entity, mode, title)
        self.presenter = presenter
        self.values: Dict[str, Any] = {}

    def get_value(self, name: str) -> Any:
        return self.values.get(name)

    def set_value(self, name: str, value: Any):
        self.values[name] = value

    def show_error(self, error: Exception):
        self.presenter.output(f"❌ {self.title}: {error}")

    def render(self):
        """显示全部字段"""
        for name, value in self.values.items():
            self.presenter.output(f"  {name}: {'' if value is None else value}")

    def prompt_fields(self):
        """逐个字段提示输入（只读表单只显示）"""
        if self.read_only:
            self.render()
            return
        for name in list(self.values):
            if name == "id":
                continue
            current = self.values[name]
            shown = "" if current is None else current
            raw = self.presenter.ask(f"  {name} [{shown}]: ")
            if raw:
                self.values[name] = raw


class TerminalConsole:
    """终端交互循环

    Attributes:
        context: 应用上下文（presenter 必须是 TerminalPresenter）
        tabs: 标签页管理器
        reports: 报表服务
    """

    def __init__(self, context: AppContext, tabs: TabManager,
                 reports: Optional[ReportService] = None):
        self.context = context
        self.tabs = tabs
        self.reports = reports or ReportService(context.db, context.display_tz)
        self.presenter: TerminalPresenter = context.presenter
        self.running = False

    def run(self):
        """运行主菜单循环，输入 quit 退出"""
        self.running = True
        out = self.presenter.output
        out("=" * 60)
        out("  📅 预约排程 - 终端模式")
        out("  c 顾客 | a 预约 | r 报表 | q 退出")
        out("=" * 60)

        while self.running:
            try:
                command = self.presenter.ask("> ").lower()
            except (EOFError, KeyboardInterrupt):
                out("\n👋 再见！")
                break

            if not command:
                continue
            if command in EXIT_COMMANDS:
                out("👋 再见！")
                break
            if command in ("c", "customers"):
                self.run_tab("customer")
            elif command in ("a", "appointments"):
                self.run_tab("appointment")
            elif command in ("r", "reports"):
                self.show_reports()
            else:
                out(f"未知命令: {command}")

        self.running = False

    # ================================================================
    # 标签页
    # ================================================================

    def run_tab(self, name: str):
        """进入标签页命令循环，输入 back 返回主菜单"""
        table = self.tabs.activate(name)
        self.render_table(table)

        while True:
            try:
                line = self.presenter.ask(f"{name}> ")
            except (EOFError, KeyboardInterrupt):
                return
            parts = line.split()
            if not parts:
                continue
            command, args = parts[0].lower(), parts[1:]

            if command in ("back", "b") + EXIT_COMMANDS:
                return
            if command == "list":
                self.render_table(table)
            elif command == "add":
                self.run_session(table.add())
            elif command in ("view", "edit", "delete"):
                record = self._find(table, args)
                if record is None:
                    continue
                if command == "view":
                    self.run_session(table.view(record))
                elif command == "edit":
                    self.run_session(table.edit(record))
                elif self._confirm(f"删除 {name} {record.id}?"):
                    table.delete(record)
            elif command == "filter" and name == "appointment":
                self.apply_filter(table, args)
            else:
                self.presenter.output(f"未知命令: {line}")

    def _find(self, table: RecordTable, args: List[str]):
        if len(args) != 1 or not args[0].isdigit():
            self.presenter.output("请指定记录 ID")
            return None
        record_id = int(args[0])
        for record in table:
            if record.id == record_id:
                return record
        self.presenter.output(f"找不到记录: {record_id}")
        return None

    def _confirm(self, question: str) -> bool:
        return self.presenter.ask(f"{question} (y/N): ").lower() == "y"

    def run_session(self, session: Optional[EditSession]):
        """驱动一次编辑会话：填写 → 提交，失败后可以修改重试或取消"""
        if session is None:
            self.presenter.output("已有打开的表单")
            return
        form = session.surface
        if session.read_only:
            form.render()
            session.cancel()
            return

        while not session.is_closed:
            form.prompt_fields()
            choice = self.presenter.ask("提交? (Y/n=继续修改/c=取消): ").lower()
            if choice == "c":
                session.cancel()
            elif choice in ("", "y"):
                session.commit()

    def apply_filter(self, table: RecordTable, args: List[str]):
        """处理 filter 子命令"""
        if args == ["clear"]:
            table.clear_filter()
            self.render_table(table)
            return
        if args == ["options"]:
            self.show_filter_options()
            return
        if len(args) == 3 and args[0] in ("month", "week"):
            try:
                record_filter = AppointmentFilter(
                    int(args[1]), Period(args[0]), int(args[2]),
                    tz=self.context.display_tz,
                )
            except ValueError as e:
                self.presenter.output(f"无效的筛选条件: {e}")
                return
            table.set_filter(record_filter)
            self.presenter.output(f"筛选: {record_filter.describe()}")
            self.render_table(table)
            return
        self.presenter.output("用法: filter month|week <年> <值> | filter clear | filter options")

    def show_filter_options(self):
        try:
            options = self.context.db.appointments.filter_options(self.context.display_tz)
        except DataAccessFailure as e:
            self.presenter.show_error(e)
            return
        if not options:
            self.presenter.output("没有预约")
        for year, periods in options.items():
            months = ", ".join(str(m) for m in periods[Period.MONTH])
            weeks = ", ".join(str(w) for w in periods[Period.WEEK])
            self.presenter.output(f"  {year}: 月 [{months}]  周 [{weeks}]")

    def render_table(self, table: RecordTable):
        """以文本表格显示当前集合"""
        columns = table.descriptor.columns
        out = self.presenter.output
        out(" | ".join(column.title for column in columns))
        for record in table:
            out(" | ".join(str(column.getter(record)) for column in columns))
        out(f"({len(table)} 条)")

    # ================================================================
    # 报表
    # ================================================================

    def show_reports(self):
        out = self.presenter.output
        try:
            by_month = self.reports.counts_by_month()
            by_type = self.reports.counts_by_type()
            schedules = self.reports.contact_schedules()
            divisions = self.reports.customer_divisions()
        except DataAccessFailure as e:
            logger.error(f"生成报表失败: {e}")
            self.presenter.show_error(e)
            return

        tz = self.context.display_tz
        out("\n--- Appointments by month ---")
        for row in by_month:
            out(f"  {row.month}: {row.count}")

        out("\n--- Appointments by type ---")
        for row in by_type:
            out(f"  {row.type}: {row.count}")

        out("\n--- Contact schedules ---")
        for contact, appointments in schedules:
            out(f"  {contact.name}")
            for a in appointments:
                out(
                    f"    #{a.id} {a.title} ({a.type}) "
                    f"{a.start.astimezone(tz):%Y-%m-%d %H:%M} - "
                    f"{a.end.astimezone(tz):%H:%M} customer {a.customer_id}"
                )

        out("\n--- Customers by division ---")
        for row in divisions:
            out(f"  {row.country} / {row.division}: {row.count}")
