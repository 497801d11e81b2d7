"""记录表格 - 单个实体类型的通用 CRUD 编排器。

RecordTable 持有该实体已加载记录的有序集合（加载顺序，编辑后不重新排序），
是唯一调用仓库写操作的组件：

- load(): 清空集合，按当前筛选条件重新查询
- add(): 新建模式表单，提交后 冲突检查 → insert → 追加到集合
- view(record): 只读表单，无持久化副作用
- edit(record): 编辑模式表单（作用于副本），提交后 冲突检查 → update →
  把全部字段原地合并到原记录对象
- delete(record): 级联删除 → delete → 重置 id、移出集合、发布失效事件

同一时刻每个表格最多打开一个编辑会话，会话打开期间 add/view/edit 都是空操作。
数据访问失败记录日志并显示给用户，不会向上抛出。
"""
from typing import Any, Callable, Generic, List, Optional, TypeVar

from loguru import logger

from interface.base import FormMode, FormSurface, Presenter

from .descriptors import EntityDescriptor
from .errors import DataAccessFailure, OverlappingAppointment
from .events import EventBus
from .records import Record
from .session import EditSession
from .validation import ValidationEngine

R = TypeVar("R", bound=Record)

CommitHandler = Callable[[R, FormSurface], bool]


class RecordTable(Generic[R]):
    """记录表格

    Attributes:
        descriptor: 实体描述符。
        records: 已加载的记录（加载顺序）。
        record_filter: 当前筛选条件，load() 时沿用直到 clear_filter()。
    """

    def __init__(self, descriptor: EntityDescriptor[R], presenter: Presenter,
                 engine: ValidationEngine, bus: EventBus) -> None:
        self.descriptor = descriptor
        self.presenter = presenter
        self.engine = engine
        self.bus = bus
        self.records: List[R] = []
        self.record_filter: Optional[Any] = None
        self._session: Optional[EditSession[R]] = None

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def session(self) -> Optional[EditSession[R]]:
        """当前打开的编辑会话（没有则为 None）"""
        return self._session

    @property
    def has_open_session(self) -> bool:
        return self._session is not None and not self._session.is_closed

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self):
        return iter(self.records)

    # ================================================================
    # 加载与筛选
    # ================================================================

    def load(self) -> bool:
        """重新加载集合，可重复调用（标签页重新激活、级联失效事件）。

        Returns:
            查询是否成功。
        """
        self.records.clear()
        try:
            loaded = self.descriptor.repository.select(self.record_filter)
        except DataAccessFailure as err:
            logger.error(f"加载 {self.name} 失败: {err}")
            self.presenter.show_error(err)
            return False

        self.records.extend(loaded)
        logger.debug(f"已加载 {len(self.records)} 条 {self.name} 记录")
        return True

    def set_filter(self, record_filter: Any) -> bool:
        """设置筛选条件并重新加载。"""
        self.record_filter = record_filter
        return self.load()

    def clear_filter(self) -> bool:
        """清除筛选条件并重新加载。"""
        self.record_filter = None
        return self.load()

    # ================================================================
    # 表单操作
    # ================================================================

    def add(self) -> Optional[EditSession[R]]:
        """打开新建表单。

        Returns:
            新打开的会话；已有会话打开时返回 None。
        """
        return self._open(FormMode.CREATE, self.descriptor.blank(), self._insert)

    def view(self, record: R) -> Optional[EditSession[R]]:
        """以只读方式打开记录（作用于副本）。"""
        return self._open(FormMode.READ, record.copy(), None)

    def edit(self, record: R) -> Optional[EditSession[R]]:
        """打开编辑表单，提交成功后合并到 ``record``。"""

        def commit(working: R, surface: FormSurface) -> bool:
            return self._update(record, working, surface)

        return self._open(FormMode.UPDATE, record.copy(), commit)

    def _open(self, mode: FormMode, working: R,
              on_commit: Optional[CommitHandler]) -> Optional[EditSession[R]]:
        if self.has_open_session:
            logger.debug(f"{self.name} 已有打开的表单，忽略 {mode.value} 请求")
            return None

        surface = self.presenter.open_form(
            self.name, mode, self.descriptor.title_for(mode)
        )

        def complete(result: Optional[R]) -> bool:
            if result is None:
                self._session = None
                return True
            if on_commit is not None and on_commit(result, surface):
                self._session = None
                return True
            return False

        session = EditSession(
            self.descriptor, mode, working, surface, self.engine, complete
        )
        self._session = session
        return session.open()

    # ================================================================
    # 持久化
    # ================================================================

    def _check_conflicts(self, working: R, surface: FormSurface) -> bool:
        try:
            ok = self.descriptor.conflict_check(working)
        except DataAccessFailure as err:
            logger.error(f"{self.name} 冲突检查失败: {err}")
            surface.show_error(err)
            return False
        if not ok:
            surface.show_error(OverlappingAppointment())
        return ok

    def _insert(self, working: R, surface: FormSurface) -> bool:
        if not self._check_conflicts(working, surface):
            return False

        try:
            new_id = self.descriptor.repository.insert(working.to_values())
        except DataAccessFailure as err:
            logger.error(f"插入 {self.name} 失败: {err}")
            surface.show_error(err)
            return False

        if not new_id:
            err = DataAccessFailure(f"{self.name}.insert")
            logger.error(f"插入 {self.name} 未返回 id")
            surface.show_error(err)
            return False

        working.id = new_id
        self.records.append(working)
        logger.info(f"新增 {self.name} {new_id}")
        return True

    def _update(self, original: R, working: R, surface: FormSurface) -> bool:
        if not self._check_conflicts(working, surface):
            return False

        try:
            count = self.descriptor.repository.update(working.id, working.to_values())
        except DataAccessFailure as err:
            logger.error(f"更新 {self.name} {working.id} 失败: {err}")
            surface.show_error(err)
            return False

        if count != 1:
            logger.error(f"更新 {self.name} {working.id} 影响了 {count} 行")
            surface.show_error(DataAccessFailure(f"{self.name}.update"))
            return False

        original.apply_changes(working)
        logger.info(f"已更新 {self.name} {working.id}")
        return True

    def delete(self, record: R) -> bool:
        """删除记录（先级联删除依赖记录）。

        Args:
            record: 表格中的记录对象。

        Returns:
            是否删除成功。
        """
        if record.is_new:
            return False

        # 删除之后依赖记录已不存在，提示必须提前生成
        message = self.descriptor.deleted_message(record)

        if not self.descriptor.delete_dependencies(record):
            logger.error(f"{self.name} {record.id} 的依赖记录删除失败，已中止")
            self.presenter.show_error(
                DataAccessFailure(f"{self.name}.delete_dependencies")
            )
            return False

        try:
            count = self.descriptor.repository.delete(record.id)
        except DataAccessFailure as err:
            logger.error(f"删除 {self.name} {record.id} 失败: {err}")
            self.presenter.show_error(err)
            return False

        if count != 1:
            logger.warning(f"删除 {self.name} {record.id} 影响了 {count} 行")
            self.presenter.show_error(DataAccessFailure(f"{self.name}.delete"))
            return False

        logger.info(f"已删除 {self.name} {record.id}")
        record.id = 0
        self.records[:] = [r for r in self.records if r is not record]
        if self.descriptor.deleted_event is not None:
            self.bus.publish(self.descriptor.deleted_event)
        self.presenter.show_info("Deleted", message)
        return True
