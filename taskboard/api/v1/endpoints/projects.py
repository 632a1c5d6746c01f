from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from taskboard.board.project_filter import ProjectCriteria, filter_and_sort
from taskboard.board.store import ServiceStore
from taskboard.board.task_state import TaskBoard
from taskboard.core.auth import get_current_session
from taskboard.core.database import get_db
from taskboard.schemas.base import BaseResponse
from taskboard.schemas.project import ProjectCreate, ProjectResponse, ProjectUpdate
from taskboard.schemas.task import BoardColumn
from taskboard.schemas.user import SessionContext
from taskboard.services.project_service import ProjectService

router = APIRouter()

@router.get("", response_model=BaseResponse[List[ProjectResponse]])
async def list_projects(
    criteria: ProjectCriteria = Depends(),
    db: AsyncSession = Depends(get_db),
    session: SessionContext = Depends(get_current_session)
):
    """获取项目列表，按派生状态筛选并排序"""
    projects = await ServiceStore(db, session).list_projects()
    return BaseResponse(data=filter_and_sort(projects, criteria))

@router.post("", response_model=BaseResponse[ProjectResponse], status_code=201)
async def create_project(
    project_data: ProjectCreate,
    db: AsyncSession = Depends(get_db),
    session: SessionContext = Depends(get_current_session)
):
    """创建项目"""
    project = await ProjectService(db, session).create_project(project_data)
    return BaseResponse(code=201, data=ProjectResponse.model_validate(project), message="Project created successfully")

@router.get("/{project_id}", response_model=BaseResponse[ProjectResponse])
async def get_project(
    project_id: int,
    db: AsyncSession = Depends(get_db),
    session: SessionContext = Depends(get_current_session)
):
    """获取项目详情"""
    project = await ProjectService(db, session).get_project_or_404(project_id)
    return BaseResponse(data=ProjectResponse.model_validate(project))

@router.put("/{project_id}", response_model=BaseResponse[ProjectResponse])
async def update_project(
    project_id: int,
    project_data: ProjectUpdate,
    db: AsyncSession = Depends(get_db),
    session: SessionContext = Depends(get_current_session)
):
    """更新项目"""
    project = await ProjectService(db, session).update_project(project_id, project_data)
    return BaseResponse(data=ProjectResponse.model_validate(project), message="Project updated successfully")

@router.delete("/{project_id}", response_model=BaseResponse[None])
async def delete_project(
    project_id: int,
    db: AsyncSession = Depends(get_db),
    session: SessionContext = Depends(get_current_session)
):
    """删除项目"""
    await ProjectService(db, session).delete_project(project_id)
    return BaseResponse(message="Project deleted successfully")

@router.get("/{project_id}/board", response_model=BaseResponse[List[BoardColumn]])
async def get_board(
    project_id: int,
    db: AsyncSession = Depends(get_db),
    session: SessionContext = Depends(get_current_session)
):
    """获取项目看板的四个状态列"""
    board = await TaskBoard.load(ServiceStore(db, session), project_id)
    return BaseResponse(data=board.columns())

@router.post("/{project_id}/teams/{team_id}", response_model=BaseResponse[ProjectResponse])
async def assign_team(
    project_id: int,
    team_id: int,
    db: AsyncSession = Depends(get_db),
    session: SessionContext = Depends(get_current_session)
):
    """把团队分配给项目"""
    project = await ProjectService(db, session).assign_team(project_id, team_id)
    return BaseResponse(data=ProjectResponse.model_validate(project), message="Team assigned successfully")
