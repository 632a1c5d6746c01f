from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from taskboard.core.auth import get_current_session
from taskboard.core.database import get_db
from taskboard.schemas.base import BaseResponse
from taskboard.schemas.task import TaskCreate, TaskResponse, TaskStatusUpdate, TaskUpdate
from taskboard.schemas.user import SessionContext
from taskboard.services.project_service import ProjectService
from taskboard.services.task_service import TaskService

router = APIRouter()

@router.get("/project/{project_id}", response_model=BaseResponse[List[TaskResponse]])
async def list_project_tasks(
    project_id: int,
    db: AsyncSession = Depends(get_db),
    session: SessionContext = Depends(get_current_session)
):
    """获取项目下的任务"""
    await ProjectService(db, session).get_project_or_404(project_id)
    tasks = await TaskService(db, session).list_by_project(project_id)
    return BaseResponse(data=[TaskResponse.model_validate(t) for t in tasks])

@router.post("", response_model=BaseResponse[TaskResponse], status_code=201)
async def create_task(
    task_data: TaskCreate,
    db: AsyncSession = Depends(get_db),
    session: SessionContext = Depends(get_current_session)
):
    """创建任务"""
    task = await TaskService(db, session).create_task(task_data)
    return BaseResponse(code=201, data=TaskResponse.model_validate(task), message="Task created successfully")

@router.get("/{task_id}", response_model=BaseResponse[TaskResponse])
async def get_task(
    task_id: int,
    db: AsyncSession = Depends(get_db),
    session: SessionContext = Depends(get_current_session)
):
    """获取任务详情"""
    task = await TaskService(db, session).get_task_or_404(task_id)
    return BaseResponse(data=TaskResponse.model_validate(task))

@router.put("/{task_id}", response_model=BaseResponse[TaskResponse])
async def update_task(
    task_id: int,
    task_data: TaskUpdate,
    db: AsyncSession = Depends(get_db),
    session: SessionContext = Depends(get_current_session)
):
    """更新任务"""
    task = await TaskService(db, session).update_task(task_id, task_data)
    return BaseResponse(data=TaskResponse.model_validate(task), message="Task updated successfully")

@router.put("/{task_id}/status", response_model=BaseResponse[TaskResponse])
async def update_task_status(
    task_id: int,
    data: TaskStatusUpdate,
    db: AsyncSession = Depends(get_db),
    session: SessionContext = Depends(get_current_session)
):
    """更新任务状态"""
    task = await TaskService(db, session).update_status(task_id, data.status)
    return BaseResponse(data=TaskResponse.model_validate(task), message="Task status updated")

@router.delete("/{task_id}", response_model=BaseResponse[None])
async def delete_task(
    task_id: int,
    db: AsyncSession = Depends(get_db),
    session: SessionContext = Depends(get_current_session)
):
    """删除任务"""
    await TaskService(db, session).delete_task(task_id)
    return BaseResponse(message="Task deleted successfully")
