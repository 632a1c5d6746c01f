"""
命令调度

每个登录用户一个 CommandDispatcher，每个表单（命令类型加目标ID）一个 MutationCoordinator，
表单上没有进行中的提交时协调器即被释放。
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from taskboard.board.coordinator import Callback, MutationCoordinator, MutationResult
from taskboard.board.task_state import ChangeState, StatusChangeFailed, TaskBoard
from taskboard.core.exceptions import TaskNotFoundException
from taskboard.core.logging import get_logger
from taskboard.schemas.command import (
    CreateProjectCommand,
    CreateTaskCommand,
    DeleteProjectCommand,
    DeleteTaskCommand,
    StatusChangeCommand,
    UpdateProjectCommand,
    UpdateTaskCommand,
)
from taskboard.schemas.project import ProjectCreate, ProjectResponse, ProjectUpdate
from taskboard.schemas.task import BoardColumn, TaskCreate, TaskUpdate
from taskboard.schemas.user import SessionContext

logger = get_logger(__name__)

ACTIONS = {
    "status-change": "update task status",
    "delete-task": "delete task",
    "create-project": "create project",
    "update-project": "update project",
    "delete-project": "delete project",
    "create-task": "create task",
    "update-task": "update task",
}


def form_key(command) -> str:
    """同一个表单的提交共享一个协调器"""
    if isinstance(command, (StatusChangeCommand, DeleteTaskCommand, UpdateTaskCommand)):
        return f"{command.kind}:{command.task_id}"
    if isinstance(command, (UpdateProjectCommand, DeleteProjectCommand)):
        return f"{command.kind}:{command.project_id}"
    if isinstance(command, CreateTaskCommand):
        return f"{command.kind}:{command.payload.get('project_id')}"
    return command.kind


@dataclass
class DispatchResult:
    result: MutationResult
    board: Optional[List[BoardColumn]] = None
    projects: Optional[List[ProjectResponse]] = None


class CommandDispatcher:
    """单个会话的命令调度器"""

    def __init__(self, session: SessionContext):
        self.session = session
        self._coordinators: Dict[str, MutationCoordinator] = {}
        self._in_use: Dict[str, int] = {}
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    def coordinator_for(self, command) -> MutationCoordinator:
        key = form_key(command)
        coordinator = self._coordinators.get(key)
        if coordinator is None:
            coordinator = MutationCoordinator(ACTIONS[command.kind])
            if self._disposed:
                coordinator.dispose()
            self._coordinators[key] = coordinator
        return coordinator

    def dispose(self) -> None:
        for coordinator in self._coordinators.values():
            coordinator.dispose()
        self._disposed = True

    @property
    def open_forms(self) -> int:
        return len(self._coordinators)

    def _release(self, key: str, coordinator: MutationCoordinator) -> None:
        # 最后一个使用者结束后才丢弃，保证同一表单的并发提交共享同一个协调器
        remaining = self._in_use.get(key, 1) - 1
        if remaining > 0:
            self._in_use[key] = remaining
            return
        self._in_use.pop(key, None)
        if self._coordinators.get(key) is coordinator:
            del self._coordinators[key]

    async def dispatch(self, command, store, on_close: Optional[Callback] = None) -> DispatchResult:
        """执行命令，成功后刷新看板或项目列表"""
        key = form_key(command)
        coordinator = self.coordinator_for(command)
        self._in_use[key] = self._in_use.get(key, 0) + 1
        try:
            return await self._dispatch(coordinator, command, store, on_close)
        finally:
            self._release(key, coordinator)

    async def _dispatch(self, coordinator: MutationCoordinator, command, store,
                        on_close: Optional[Callback]) -> DispatchResult:
        outcome = DispatchResult(result=None)
        board_project: Dict[str, Any] = {}

        async def refresh_board():
            project_id = board_project.get("id")
            if project_id is None:
                return
            board = await TaskBoard.load(store, project_id)
            outcome.board = board.columns()

        async def refresh_projects():
            outcome.projects = await store.list_projects()

        if isinstance(command, StatusChangeCommand):
            async def operation(cmd):
                task = await store.get_task(cmd.task_id)
                if task is None:
                    raise TaskNotFoundException(cmd.task_id)
                board_project["id"] = task.project_id
                board = await TaskBoard.load(store, task.project_id)
                change = await board.change_status(cmd.task_id, cmd.new_status)
                if change.state == ChangeState.FAILED:
                    raise StatusChangeFailed(change)
                return board.get(cmd.task_id)

            result = await coordinator.submit(command, operation, on_refresh=refresh_board, on_close=on_close)

        elif isinstance(command, DeleteTaskCommand):
            async def operation(cmd):
                task = await store.get_task(cmd.task_id)
                if task is None:
                    raise TaskNotFoundException(cmd.task_id)
                board_project["id"] = task.project_id
                board = await TaskBoard.load(store, task.project_id)
                await board.delete_task(cmd.task_id)
                return {"id": cmd.task_id}

            result = await coordinator.submit(command, operation, on_refresh=refresh_board, on_close=on_close)

        elif isinstance(command, CreateProjectCommand):
            result = await coordinator.submit(
                command.payload, store.create_project, schema=ProjectCreate,
                on_refresh=refresh_projects, on_close=on_close
            )

        elif isinstance(command, UpdateProjectCommand):
            async def check_dates(data):
                current = await store.get_project(command.project_id)
                if current is not None:
                    data.check_against(current.start_date, current.end_date)

            async def operation(data):
                return await store.update_project(command.project_id, data)

            result = await coordinator.submit(
                command.payload, operation, schema=ProjectUpdate,
                on_refresh=refresh_projects, on_close=on_close, precheck=check_dates
            )

        elif isinstance(command, DeleteProjectCommand):
            async def operation(cmd):
                await store.delete_project(cmd.project_id)
                return {"id": cmd.project_id}

            result = await coordinator.submit(command, operation, on_refresh=refresh_projects, on_close=on_close)

        elif isinstance(command, CreateTaskCommand):
            async def operation(data):
                board_project["id"] = data.project_id
                return await store.create_task(data)

            result = await coordinator.submit(
                command.payload, operation, schema=TaskCreate,
                on_refresh=refresh_board, on_close=on_close
            )

        elif isinstance(command, UpdateTaskCommand):
            async def operation(data):
                task = await store.update_task(command.task_id, data)
                board_project["id"] = task.project_id
                return task

            result = await coordinator.submit(
                command.payload, operation, schema=TaskUpdate,
                on_refresh=refresh_board, on_close=on_close
            )

        else:
            raise ValueError(f"Unknown command kind: {getattr(command, 'kind', None)}")

        outcome.result = result
        logger.debug(f"Command {command.kind} by user {self.session.id}: {result.outcome.value}")
        return outcome


class DispatcherRegistry:
    """每个登录用户一个调度器"""

    def __init__(self):
        self._dispatchers: Dict[str, CommandDispatcher] = {}

    def get(self, session: SessionContext) -> CommandDispatcher:
        dispatcher = self._dispatchers.get(session.id)
        if dispatcher is None or dispatcher.disposed:
            dispatcher = CommandDispatcher(session)
            self._dispatchers[session.id] = dispatcher
        else:
            dispatcher.session = session
        return dispatcher

    def dispose(self, user_id: str) -> bool:
        dispatcher = self._dispatchers.pop(user_id, None)
        if dispatcher is None:
            return False
        dispatcher.dispose()
        return True

    def dispose_all(self) -> None:
        for dispatcher in self._dispatchers.values():
            dispatcher.dispose()
        self._dispatchers.clear()

    def __contains__(self, user_id: str) -> bool:
        return user_id in self._dispatchers

    def __len__(self) -> int:
        return len(self._dispatchers)
