"""项目服务模块

项目的增删改查以及团队分配
"""
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from taskboard.core.exceptions import (
    ConflictException,
    ErrorCode,
    ProjectNotFoundException,
    TeamNotFoundException,
)
from taskboard.models.project import Project, Team
from taskboard.models.task import Task
from taskboard.schemas.project import ProjectCreate, ProjectUpdate, TeamCreate
from taskboard.services.base import BaseService


def _project_query():
    # 同一会话内写入后再读取时，需要覆盖身份映射中的旧数据
    return select(Project).options(
        selectinload(Project.tasks).selectinload(Task.assigned_users),
        selectinload(Project.teams),
    ).execution_options(populate_existing=True)


class ProjectService(BaseService):
    """项目服务类"""

    async def list_projects(self) -> List[Project]:
        """获取所有项目，包含任务和团队"""
        result = await self.db.execute(_project_query().order_by(Project.id))
        return list(result.scalars().all())

    async def get_project(self, project_id: int) -> Optional[Project]:
        result = await self.db.execute(_project_query().where(Project.id == project_id))
        return result.scalar_one_or_none()

    async def get_project_or_404(self, project_id: int) -> Project:
        project = await self.get_project(project_id)
        if project is None:
            raise ProjectNotFoundException(project_id)
        return project

    async def create_project(self, project_data: ProjectCreate) -> Project:
        """创建项目"""
        project = Project(
            name=project_data.name,
            description=project_data.description,
            start_date=project_data.start_date,
            end_date=project_data.end_date,
        )
        self.db.add(project)
        await self._commit("project creation")

        self._log_event("project_created", "project", project.id, project.name)
        return await self.get_project(project.id)

    async def update_project(self, project_id: int, project_data: ProjectUpdate) -> Project:
        """更新项目，只修改传入的字段"""
        project = await self.get_project_or_404(project_id)
        project_data.check_against(project.start_date, project.end_date)
        update_data = project_data.model_dump(exclude_unset=True, exclude_none=True)

        for field, value in update_data.items():
            setattr(project, field, value)

        await self._commit("project update")

        self._log_event("project_updated", "project", project_id, ",".join(sorted(update_data)))
        return await self.get_project(project_id)

    async def delete_project(self, project_id: int) -> None:
        """删除项目，任务级联删除"""
        project = await self.get_project_or_404(project_id)
        await self.db.delete(project)
        await self._commit("project deletion")
        self._log_event("project_deleted", "project", project_id)

    async def list_teams(self) -> List[Team]:
        result = await self.db.execute(select(Team).order_by(Team.name))
        return list(result.scalars().all())

    async def get_team(self, team_id: int) -> Team:
        result = await self.db.execute(select(Team).where(Team.id == team_id))
        team = result.scalar_one_or_none()
        if team is None:
            raise TeamNotFoundException(team_id)
        return team

    async def create_team(self, team_data: TeamCreate) -> Team:
        """创建团队"""
        team = Team(name=team_data.name, description=team_data.description)
        self.db.add(team)
        await self._commit("team creation")
        self._log_event("team_created", "team", team.id, team.name)

        result = await self.db.execute(
            select(Team).where(Team.id == team.id).execution_options(populate_existing=True)
        )
        return result.scalar_one()

    async def assign_team(self, project_id: int, team_id: int) -> Project:
        """把团队分配给项目"""
        project = await self.get_project_or_404(project_id)
        team = await self.get_team(team_id)

        if any(t.id == team.id for t in project.teams):
            raise ConflictException(
                ErrorCode.TEAM_ALREADY_ASSIGNED,
                f"Team {team_id} is already assigned to project {project_id}",
                {"project_id": project_id, "team_id": team_id},
            )

        project.teams.append(team)
        await self._commit("team assignment")
        self._log_event("team_assigned", "project", project_id, f"team={team_id}")
        return await self.get_project(project_id)
