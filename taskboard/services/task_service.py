"""任务服务模块

包含任务相关的业务逻辑处理
"""
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from taskboard.core.exceptions import (
    ProjectNotFoundException,
    TaskNotFoundException,
    UserNotFoundException,
    ValidationException,
)
from taskboard.models.enums import TaskStatus
from taskboard.models.project import Project
from taskboard.models.task import Task
from taskboard.models.user import User
from taskboard.schemas.task import TaskCreate, TaskUpdate
from taskboard.services.base import BaseService


def _task_query():
    return select(Task).options(
        selectinload(Task.assigned_users)
    ).execution_options(populate_existing=True)


class TaskService(BaseService):
    """任务服务类"""

    async def list_by_project(self, project_id: int) -> List[Task]:
        """获取项目下的任务，按ID排序"""
        result = await self.db.execute(
            _task_query().where(Task.project_id == project_id).order_by(Task.id)
        )
        return list(result.scalars().all())

    async def get_task(self, task_id: int) -> Optional[Task]:
        result = await self.db.execute(_task_query().where(Task.id == task_id))
        return result.scalar_one_or_none()

    async def get_task_or_404(self, task_id: int) -> Task:
        task = await self.get_task(task_id)
        if task is None:
            raise TaskNotFoundException(task_id)
        return task

    async def _load_users(self, user_ids: List[str]) -> List[User]:
        if not user_ids:
            return []
        unique_ids = list(dict.fromkeys(user_ids))
        result = await self.db.execute(select(User).where(User.id.in_(unique_ids)))
        users = {user.id: user for user in result.scalars().all()}
        for user_id in unique_ids:
            if user_id not in users:
                raise UserNotFoundException(user_id)
        return [users[user_id] for user_id in unique_ids]

    async def create_task(self, task_data: TaskCreate) -> Task:
        """创建新任务"""
        project = await self.db.get(Project, task_data.project_id)
        if project is None:
            raise ProjectNotFoundException(task_data.project_id)

        task = Task(
            title=task_data.title,
            description=task_data.description,
            status=task_data.status,
            priority=task_data.priority,
            tags=task_data.tags,
            start_date=task_data.start_date,
            due_date=task_data.due_date,
            points=task_data.points,
            project_id=task_data.project_id,
        )
        task.assigned_users = await self._load_users(task_data.assigned_user_ids)

        self.db.add(task)
        await self._commit("task creation")

        self._log_event("task_created", "task", task.id, task.title)
        return await self.get_task(task.id)

    async def update_task(self, task_id: int, task_data: TaskUpdate) -> Task:
        """更新任务，只修改传入的字段"""
        task = await self.get_task_or_404(task_id)
        update_data = task_data.model_dump(exclude_unset=True, exclude_none=True)
        assigned_user_ids = update_data.pop("assigned_user_ids", None)

        start_date = update_data.get("start_date", task.start_date)
        due_date = update_data.get("due_date", task.due_date)
        if start_date and due_date and start_date > due_date:
            raise ValidationException("Due date must be after start date.")

        for field, value in update_data.items():
            setattr(task, field, value)

        if assigned_user_ids is not None:
            task.assigned_users = await self._load_users(assigned_user_ids)

        await self._commit("task update")

        self._log_event("task_updated", "task", task_id, ",".join(sorted(task_data.model_fields_set)))
        return await self.get_task(task_id)

    async def update_status(self, task_id: int, new_status: TaskStatus) -> Task:
        """更新任务状态，任意状态之间都可以直接切换"""
        task = await self.get_task_or_404(task_id)
        old_status = task.status
        task.status = new_status
        await self._commit("task status update")

        self._log_event(
            "task_status_changed", "task", task_id,
            f"{TaskStatus(old_status).value} -> {TaskStatus(new_status).value}"
        )
        return await self.get_task(task_id)

    async def delete_task(self, task_id: int) -> None:
        """删除任务"""
        task = await self.get_task_or_404(task_id)
        await self.db.delete(task)
        await self._commit("task deletion")
        self._log_event("task_deleted", "task", task_id)
