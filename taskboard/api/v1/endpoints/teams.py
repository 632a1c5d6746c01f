from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from taskboard.core.auth import get_current_session
from taskboard.core.database import get_db
from taskboard.schemas.base import BaseResponse
from taskboard.schemas.project import TeamCreate, TeamResponse
from taskboard.schemas.user import SessionContext
from taskboard.services.project_service import ProjectService

router = APIRouter()

@router.get("", response_model=BaseResponse[List[TeamResponse]])
async def list_teams(
    db: AsyncSession = Depends(get_db),
    session: SessionContext = Depends(get_current_session)
):
    """获取团队列表"""
    teams = await ProjectService(db, session).list_teams()
    return BaseResponse(data=[TeamResponse.model_validate(t) for t in teams])

@router.post("", response_model=BaseResponse[TeamResponse], status_code=201)
async def create_team(
    team_data: TeamCreate,
    db: AsyncSession = Depends(get_db),
    session: SessionContext = Depends(get_current_session)
):
    """创建团队"""
    team = await ProjectService(db, session).create_team(team_data)
    return BaseResponse(code=201, data=TeamResponse.model_validate(team), message="Team created successfully")
