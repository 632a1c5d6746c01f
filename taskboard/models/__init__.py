from taskboard.models.enums import TaskStatus, TaskPriority, ProjectStatus, SortOrder
from taskboard.models.user import User
from taskboard.models.project import Project, Team, project_teams
from taskboard.models.task import Task, task_assignees

__all__ = [
    "TaskStatus",
    "TaskPriority",
    "ProjectStatus",
    "SortOrder",
    "User",
    "Project",
    "Team",
    "project_teams",
    "Task",
    "task_assignees",
]
