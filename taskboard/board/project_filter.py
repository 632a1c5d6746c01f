"""
项目筛选与排序

纯函数实现，不修改输入；对同一条件重复应用结果不变。
"""
from datetime import date
from typing import Any, Iterable, List, Optional

from pydantic import BaseModel

from taskboard.models.enums import ProjectStatus, SortOrder, TaskStatus


def derived_status(project: Any) -> ProjectStatus:
    """根据项目的任务集合计算派生状态"""
    tasks = list(project.tasks or [])
    if not tasks:
        return ProjectStatus.NO_TASKS
    if all(TaskStatus(task.status) == TaskStatus.COMPLETED for task in tasks):
        return ProjectStatus.COMPLETED
    return ProjectStatus.IN_PROGRESS


class ProjectCriteria(BaseModel):
    """项目列表的筛选与排序条件

    task_count_order 与 due_date_order 同时给出时，以任务数排序为准。
    """
    status: Optional[ProjectStatus] = None
    task_count_order: Optional[SortOrder] = None
    due_date_order: Optional[SortOrder] = None

    @property
    def effective_order(self) -> Optional[str]:
        if self.task_count_order is not None:
            return "task_count"
        if self.due_date_order is not None:
            return "due_date"
        return None


def _task_count_key(project: Any) -> int:
    return len(project.tasks or [])


def _end_date_key(project: Any):
    # 缺失的结束日期视为正无穷
    end_date: Optional[date] = project.end_date
    return (end_date is None, end_date or date.min)


def filter_and_sort(projects: Iterable[Any], criteria: Optional[ProjectCriteria] = None) -> List[Any]:
    """按派生状态筛选，再按任务数或结束日期稳定排序"""
    criteria = criteria or ProjectCriteria()
    result = list(projects)

    if criteria.status is not None:
        result = [p for p in result if derived_status(p) == criteria.status]

    order = criteria.effective_order
    if order == "task_count":
        result = _stable_sort(result, _task_count_key, criteria.task_count_order)
    elif order == "due_date":
        result = _stable_sort(result, _end_date_key, criteria.due_date_order)

    return result


def _stable_sort(items: List[Any], key, order: SortOrder) -> List[Any]:
    # sorted(reverse=True) 对相等元素仍保持原有顺序
    return sorted(items, key=key, reverse=order == SortOrder.DESC)
