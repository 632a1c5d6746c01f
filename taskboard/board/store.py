"""
实体存储接口

看板核心只依赖 EntityStore 协议；ServiceStore 用 SQLAlchemy 服务实现它，
测试里则换成内存实现。
"""
from typing import List, Optional, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.models.enums import TaskStatus
from taskboard.schemas.project import ProjectCreate, ProjectResponse, ProjectUpdate
from taskboard.schemas.task import TaskCreate, TaskResponse, TaskUpdate
from taskboard.schemas.user import SessionContext, UserSummary
from taskboard.services.project_service import ProjectService
from taskboard.services.task_service import TaskService
from taskboard.services.user_service import UserService


class EntityStore(Protocol):
    async def list_projects(self) -> List[ProjectResponse]: ...

    async def get_project(self, project_id: int) -> Optional[ProjectResponse]: ...

    async def create_project(self, data: ProjectCreate) -> ProjectResponse: ...

    async def update_project(self, project_id: int, data: ProjectUpdate) -> ProjectResponse: ...

    async def delete_project(self, project_id: int) -> None: ...

    async def list_tasks_by_project(self, project_id: int) -> List[TaskResponse]: ...

    async def get_task(self, task_id: int) -> Optional[TaskResponse]: ...

    async def create_task(self, data: TaskCreate) -> TaskResponse: ...

    async def update_task(self, task_id: int, data: TaskUpdate) -> TaskResponse: ...

    async def update_task_status(self, task_id: int, new_status: TaskStatus) -> TaskResponse: ...

    async def delete_task(self, task_id: int) -> None: ...

    async def list_users(self) -> List[UserSummary]: ...


class ServiceStore:
    """基于数据库服务的 EntityStore 实现"""

    def __init__(self, db: AsyncSession, session: Optional[SessionContext] = None):
        self.projects = ProjectService(db, session)
        self.tasks = TaskService(db, session)
        self.users = UserService(db, session)

    async def list_projects(self) -> List[ProjectResponse]:
        projects = await self.projects.list_projects()
        return [ProjectResponse.model_validate(p) for p in projects]

    async def get_project(self, project_id: int) -> Optional[ProjectResponse]:
        project = await self.projects.get_project(project_id)
        return ProjectResponse.model_validate(project) if project is not None else None

    async def create_project(self, data: ProjectCreate) -> ProjectResponse:
        return ProjectResponse.model_validate(await self.projects.create_project(data))

    async def update_project(self, project_id: int, data: ProjectUpdate) -> ProjectResponse:
        return ProjectResponse.model_validate(await self.projects.update_project(project_id, data))

    async def delete_project(self, project_id: int) -> None:
        await self.projects.delete_project(project_id)

    async def list_tasks_by_project(self, project_id: int) -> List[TaskResponse]:
        tasks = await self.tasks.list_by_project(project_id)
        return [TaskResponse.model_validate(t) for t in tasks]

    async def get_task(self, task_id: int) -> Optional[TaskResponse]:
        task = await self.tasks.get_task(task_id)
        return TaskResponse.model_validate(task) if task is not None else None

    async def create_task(self, data: TaskCreate) -> TaskResponse:
        return TaskResponse.model_validate(await self.tasks.create_task(data))

    async def update_task(self, task_id: int, data: TaskUpdate) -> TaskResponse:
        return TaskResponse.model_validate(await self.tasks.update_task(task_id, data))

    async def update_task_status(self, task_id: int, new_status: TaskStatus) -> TaskResponse:
        return TaskResponse.model_validate(await self.tasks.update_status(task_id, new_status))

    async def delete_task(self, task_id: int) -> None:
        await self.tasks.delete_task(task_id)

    async def list_users(self) -> List[UserSummary]:
        users = await self.users.list_users()
        return [UserSummary.model_validate(u) for u in users]
