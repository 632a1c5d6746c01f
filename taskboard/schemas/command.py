"""
命令对象

前端不再传递回调闭包，而是提交带 kind 字段的命令，由调度器交给变更协调器执行。
"""
from pydantic import BaseModel, Field, TypeAdapter
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from taskboard.models.enums import TaskStatus
from taskboard.schemas.project import ProjectResponse
from taskboard.schemas.task import BoardColumn

class StatusChangeCommand(BaseModel):
    kind: Literal["status-change"] = "status-change"
    task_id: int
    new_status: TaskStatus

class DeleteTaskCommand(BaseModel):
    kind: Literal["delete-task"] = "delete-task"
    task_id: int

class CreateProjectCommand(BaseModel):
    kind: Literal["create-project"] = "create-project"
    payload: Dict[str, Any] = Field(default_factory=dict)

class UpdateProjectCommand(BaseModel):
    kind: Literal["update-project"] = "update-project"
    project_id: int
    payload: Dict[str, Any] = Field(default_factory=dict)

class DeleteProjectCommand(BaseModel):
    kind: Literal["delete-project"] = "delete-project"
    project_id: int

class CreateTaskCommand(BaseModel):
    kind: Literal["create-task"] = "create-task"
    payload: Dict[str, Any] = Field(default_factory=dict)

class UpdateTaskCommand(BaseModel):
    kind: Literal["update-task"] = "update-task"
    task_id: int
    payload: Dict[str, Any] = Field(default_factory=dict)

Command = Annotated[
    Union[
        StatusChangeCommand,
        DeleteTaskCommand,
        CreateProjectCommand,
        UpdateProjectCommand,
        DeleteProjectCommand,
        CreateTaskCommand,
        UpdateTaskCommand,
    ],
    Field(discriminator="kind"),
]

command_adapter = TypeAdapter(Command)

class CommandResponse(BaseModel):
    outcome: str
    message: Optional[str] = None
    data: Optional[Any] = None
    board: Optional[List[BoardColumn]] = None
    projects: Optional[List[ProjectResponse]] = None
