# tests/fakes.py

import asyncio
from datetime import date
from typing import Dict, List, Optional, Set

from taskboard.core.exceptions import ProjectNotFoundException, TaskNotFoundException
from taskboard.models.enums import TaskPriority, TaskStatus
from taskboard.schemas.project import ProjectCreate, ProjectResponse, ProjectUpdate
from taskboard.schemas.task import TaskCreate, TaskResponse, TaskUpdate
from taskboard.schemas.user import UserSummary


class StoreError(Exception):
    pass


class FakeRedis:
    """
    In-memory stand-in for redis.asyncio.Redis (decode_responses=True).

    Expiry is recorded but not enforced.
    """

    def __init__(self) -> None:
        self.data: Dict[str, str] = {}
        self.expiry: Dict[str, Optional[int]] = {}
        self.closed = False

    async def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    async def set(self, key: str, value: str, ex: Optional[int] = None) -> bool:
        self.data[key] = value
        self.expiry[key] = ex
        return True

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                removed += 1
            self.expiry.pop(key, None)
        return removed

    async def exists(self, *keys: str) -> int:
        return sum(1 for key in keys if key in self.data)

    async def ping(self) -> bool:
        return True

    async def flushdb(self) -> bool:
        self.data.clear()
        self.expiry.clear()
        return True

    async def aclose(self) -> None:
        self.closed = True


class FakeStore:
    """
    In-memory EntityStore.

    - Records every call in `calls`
    - Methods named in `fail_on` raise StoreError
    - When `gate` is set, mutating methods wait on it before doing anything
    """

    def __init__(self) -> None:
        self.projects: Dict[int, dict] = {}
        self.tasks: Dict[int, TaskResponse] = {}
        self.users: List[UserSummary] = []
        self.calls: List[str] = []
        self.fail_on: Set[str] = set()
        self.gate: Optional[asyncio.Event] = None
        self._next_project_id = 1
        self._next_task_id = 1

    async def _enter(self, name: str) -> None:
        self.calls.append(name)
        if self.gate is not None:
            await self.gate.wait()
        if name in self.fail_on:
            raise StoreError(f"{name} unavailable")

    def count(self, name: str) -> int:
        return self.calls.count(name)

    # seeding helpers

    def add_project(self, name: str = "Project", description: str = "desc",
                    start_date: Optional[date] = None, end_date: Optional[date] = None) -> int:
        project_id = self._next_project_id
        self._next_project_id += 1
        self.projects[project_id] = {
            "id": project_id,
            "name": name,
            "description": description,
            "start_date": start_date,
            "end_date": end_date,
        }
        return project_id

    def add_task(self, project_id: int, title: str = "Task",
                 status: TaskStatus = TaskStatus.TO_DO) -> int:
        task_id = self._next_task_id
        self._next_task_id += 1
        self.tasks[task_id] = TaskResponse(
            id=task_id,
            title=title,
            status=status,
            priority=TaskPriority.MEDIUM,
            project_id=project_id,
        )
        return task_id

    def _project(self, project_id: int) -> ProjectResponse:
        tasks = [t for t in self.tasks.values() if t.project_id == project_id]
        return ProjectResponse(**self.projects[project_id], tasks=sorted(tasks, key=lambda t: t.id))

    # EntityStore

    async def list_projects(self) -> List[ProjectResponse]:
        self.calls.append("list_projects")
        return [self._project(pid) for pid in sorted(self.projects)]

    async def get_project(self, project_id: int) -> Optional[ProjectResponse]:
        self.calls.append("get_project")
        if project_id not in self.projects:
            return None
        return self._project(project_id)

    async def create_project(self, data: ProjectCreate) -> ProjectResponse:
        await self._enter("create_project")
        project_id = self.add_project(data.name, data.description, data.start_date, data.end_date)
        return self._project(project_id)

    async def update_project(self, project_id: int, data: ProjectUpdate) -> ProjectResponse:
        await self._enter("update_project")
        if project_id not in self.projects:
            raise ProjectNotFoundException(project_id)
        self.projects[project_id].update(data.model_dump(exclude_unset=True, exclude_none=True))
        return self._project(project_id)

    async def delete_project(self, project_id: int) -> None:
        await self._enter("delete_project")
        if self.projects.pop(project_id, None) is None:
            raise ProjectNotFoundException(project_id)
        self.tasks = {tid: t for tid, t in self.tasks.items() if t.project_id != project_id}

    async def list_tasks_by_project(self, project_id: int) -> List[TaskResponse]:
        self.calls.append("list_tasks_by_project")
        return sorted((t for t in self.tasks.values() if t.project_id == project_id), key=lambda t: t.id)

    async def get_task(self, task_id: int) -> Optional[TaskResponse]:
        self.calls.append("get_task")
        return self.tasks.get(task_id)

    async def create_task(self, data: TaskCreate) -> TaskResponse:
        await self._enter("create_task")
        if data.project_id not in self.projects:
            raise ProjectNotFoundException(data.project_id)
        task_id = self.add_task(data.project_id, data.title, data.status)
        return self.tasks[task_id]

    async def update_task(self, task_id: int, data: TaskUpdate) -> TaskResponse:
        await self._enter("update_task")
        if task_id not in self.tasks:
            raise TaskNotFoundException(task_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        changes.pop("assigned_user_ids", None)
        self.tasks[task_id] = self.tasks[task_id].model_copy(update=changes)
        return self.tasks[task_id]

    async def update_task_status(self, task_id: int, new_status: TaskStatus) -> TaskResponse:
        await self._enter("update_task_status")
        if task_id not in self.tasks:
            raise TaskNotFoundException(task_id)
        self.tasks[task_id] = self.tasks[task_id].model_copy(update={"status": new_status})
        return self.tasks[task_id]

    async def delete_task(self, task_id: int) -> None:
        await self._enter("delete_task")
        if self.tasks.pop(task_id, None) is None:
            raise TaskNotFoundException(task_id)

    async def list_users(self) -> List[UserSummary]:
        self.calls.append("list_users")
        return list(self.users)
