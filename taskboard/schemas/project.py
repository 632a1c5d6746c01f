from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator
from typing import Optional, List
from datetime import date, datetime

from taskboard.board.project_filter import derived_status
from taskboard.core.exceptions import ValidationException
from taskboard.models.enums import ProjectStatus
from taskboard.schemas.task import TaskResponse

def _blank_to_none(v):
    if isinstance(v, str) and not v.strip():
        return None
    return v

class ProjectDates(BaseModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @field_validator('start_date', 'end_date', mode='before')
    @classmethod
    def empty_date(cls, v):
        return _blank_to_none(v)

    @model_validator(mode='after')
    def check_date_order(self):
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError('End date must be after start date.')
        return self

class ProjectCreate(ProjectDates):
    name: str = ""
    description: str = ""

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Project name is required')
        return v

    @field_validator('description')
    @classmethod
    def validate_description(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Project description is required')
        return v

    @model_validator(mode='after')
    def check_date_pair(self):
        if (self.start_date is None) != (self.end_date is None):
            raise ValueError('Both start date and end date are required')
        return self

class ProjectUpdate(ProjectDates):
    name: Optional[str] = None
    description: Optional[str] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError('Project name is required')
        return v

    @field_validator('description')
    @classmethod
    def validate_description(cls, v):
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError('Project description is required')
        return v

    def check_against(self, current_start: Optional[date], current_end: Optional[date]) -> None:
        """与项目现有日期合并后校验：两个日期要么都有要么都没有，且开始不晚于结束"""
        update = self.model_dump(exclude_unset=True, exclude_none=True)
        start_date = update.get("start_date", current_start)
        end_date = update.get("end_date", current_end)
        if (start_date is None) != (end_date is None):
            raise ValidationException("Both start date and end date are required")
        if start_date and end_date and start_date > end_date:
            raise ValidationException("End date must be after start date.")

class TeamCreate(BaseModel):
    name: str
    description: Optional[str] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Team name is required')
        return v

class TeamSummary(BaseModel):
    id: int
    name: str

    model_config = ConfigDict(from_attributes=True)

class TeamResponse(TeamSummary):
    description: Optional[str] = None
    created_at: Optional[datetime] = None

class ProjectResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    tasks: List[TaskResponse] = Field(default_factory=list)
    teams: List[TeamSummary] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @computed_field
    @property
    def status(self) -> ProjectStatus:
        return derived_status(self)

    @computed_field
    @property
    def task_count(self) -> int:
        return len(self.tasks)
