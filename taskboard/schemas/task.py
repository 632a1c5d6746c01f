from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import Optional, List
from datetime import date, datetime

from taskboard.models.enums import TaskStatus, TaskPriority
from taskboard.schemas.user import UserSummary

def _blank_to_none(v):
    if isinstance(v, str) and not v.strip():
        return None
    return v

class TaskDates(BaseModel):
    start_date: Optional[date] = None
    due_date: Optional[date] = None

    @field_validator('start_date', 'due_date', mode='before')
    @classmethod
    def empty_date(cls, v):
        return _blank_to_none(v)

    @model_validator(mode='after')
    def check_dates(self):
        if self.start_date and self.due_date and self.start_date > self.due_date:
            raise ValueError('Due date must be after start date.')
        return self

class TaskCreate(TaskDates):
    title: str = ""
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: TaskPriority = TaskPriority.MEDIUM
    tags: Optional[str] = None
    points: Optional[int] = Field(default=None, ge=0)
    project_id: int
    assigned_user_ids: List[str] = Field(default_factory=list)

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Task title is required!')
        return v

    @model_validator(mode='after')
    def check_status(self):
        if self.status is None:
            raise ValueError('Please select a task status.')
        return self

class TaskUpdate(TaskDates):
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    tags: Optional[str] = None
    points: Optional[int] = Field(default=None, ge=0)
    assigned_user_ids: Optional[List[str]] = None

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError('Task title is required!')
        return v

class TaskStatusUpdate(BaseModel):
    status: TaskStatus

class TaskResponse(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    status: TaskStatus
    priority: TaskPriority
    tags: Optional[str] = None
    start_date: Optional[date] = None
    due_date: Optional[date] = None
    points: Optional[int] = None
    project_id: int
    assigned_users: List[UserSummary] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class BoardColumn(BaseModel):
    """看板的一列"""
    status: TaskStatus
    label: str
    tasks: List[TaskResponse] = Field(default_factory=list)
