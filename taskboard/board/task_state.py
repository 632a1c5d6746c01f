"""
任务状态引擎

四个状态之间可以任意切换。状态修改先在本地生效（乐观更新），
持久化失败时把任务恢复为原状态。删除则等存储确认后才从本地移除。
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from taskboard.core.exceptions import ProjectNotFoundException, TaskNotFoundException, error_message
from taskboard.core.logging import get_logger
from taskboard.models.enums import TaskStatus
from taskboard.schemas.task import BoardColumn, TaskResponse

logger = get_logger(__name__)


def group_by_status(tasks: Iterable[Any]) -> Dict[TaskStatus, List[Any]]:
    """按状态分组，每个状态都有对应的列表，组内保持输入顺序"""
    groups: Dict[TaskStatus, List[Any]] = {status: [] for status in TaskStatus}
    for task in tasks:
        groups[TaskStatus(task.status)].append(task)
    return groups


class ChangeState(str, Enum):
    PENDING = "pending"
    COMMITTED = "committed"
    FAILED = "failed"


@dataclass
class StatusChange:
    """一次状态修改：pending -> committed | failed"""
    task_id: int
    previous_status: TaskStatus
    new_status: TaskStatus
    state: ChangeState = ChangeState.PENDING
    error: Optional[str] = None
    reverted: bool = False


class StatusChangeFailed(Exception):
    def __init__(self, change: StatusChange):
        self.change = change
        super().__init__(change.error or "status change failed")


class TaskBoard:
    """单个项目的任务看板"""

    def __init__(self, store, project_id: int, tasks: Iterable[TaskResponse] = ()):
        self.store = store
        self.project_id = project_id
        self._tasks: List[TaskResponse] = list(tasks)
        self._latest: Dict[int, StatusChange] = {}
        # 存储最近一次确认的状态
        self._confirmed: Dict[int, TaskStatus] = {t.id: TaskStatus(t.status) for t in self._tasks}

    @classmethod
    async def load(cls, store, project_id: int) -> "TaskBoard":
        project = await store.get_project(project_id)
        if project is None:
            raise ProjectNotFoundException(project_id)
        tasks = await store.list_tasks_by_project(project_id)
        return cls(store, project_id, tasks)

    async def refresh(self) -> None:
        self._tasks = list(await self.store.list_tasks_by_project(self.project_id))
        self._latest.clear()
        self._confirmed = {t.id: TaskStatus(t.status) for t in self._tasks}

    @property
    def tasks(self) -> List[TaskResponse]:
        return list(self._tasks)

    def get(self, task_id: int) -> Optional[TaskResponse]:
        for task in self._tasks:
            if task.id == task_id:
                return task
        return None

    def _replace(self, task_id: int, task: TaskResponse) -> None:
        for index, current in enumerate(self._tasks):
            if current.id == task_id:
                self._tasks[index] = task
                return

    def grouped(self) -> Dict[TaskStatus, List[TaskResponse]]:
        return group_by_status(self._tasks)

    def columns(self) -> List[BoardColumn]:
        return [
            BoardColumn(status=status, label=status.label, tasks=tasks)
            for status, tasks in self.grouped().items()
        ]

    async def change_status(self, task_id: int, new_status: TaskStatus) -> StatusChange:
        """乐观地修改任务状态；失败时返回 failed 并回滚，不抛出异常"""
        task = self.get(task_id)
        if task is None:
            raise TaskNotFoundException(task_id)

        new_status = TaskStatus(new_status)
        change = StatusChange(task_id, TaskStatus(task.status), new_status)
        self._latest[task_id] = change
        self._replace(task_id, task.model_copy(update={"status": new_status}))

        try:
            updated = await self.store.update_task_status(task_id, new_status)
        except Exception as exc:
            change.state = ChangeState.FAILED
            change.error = error_message(exc)
            logger.warning(f"Status change of task {task_id} to {new_status.value} failed: {change.error}")
            self._revert(change)
            return change

        change.state = ChangeState.COMMITTED
        if self.get(task_id) is not None:
            self._confirmed[task_id] = TaskStatus(updated.status)
            if self._latest.get(task_id) is change:
                self._replace(task_id, updated)
                del self._latest[task_id]
        return change

    def _revert(self, change: StatusChange) -> None:
        # 任务已被删除或已有更新的修改时不回滚
        current = self.get(change.task_id)
        if current is None or current.status != change.new_status:
            return
        if self._latest.get(change.task_id) is not change:
            return
        restored = self._confirmed.get(change.task_id, change.previous_status)
        self._replace(change.task_id, current.model_copy(update={"status": restored}))
        del self._latest[change.task_id]
        change.reverted = True

    async def delete_task(self, task_id: int) -> None:
        """存储确认删除后再从本地移除"""
        await self.store.delete_task(task_id)
        self._tasks = [task for task in self._tasks if task.id != task_id]
        self._latest.pop(task_id, None)
        self._confirmed.pop(task_id, None)
