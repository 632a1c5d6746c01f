"""
枚举定义模块
包含系统中所有的枚举类型定义
"""
import enum


class TaskStatus(str, enum.Enum):
    """任务状态枚举"""
    TO_DO = "TO_DO"                # 待办
    IN_PROGRESS = "IN_PROGRESS"    # 进行中
    IN_REVIEW = "IN_REVIEW"        # 审核中
    COMPLETED = "COMPLETED"        # 已完成

    @property
    def label(self) -> str:
        return TASK_STATUS_LABELS[self]


TASK_STATUS_LABELS = {
    TaskStatus.TO_DO: "To Do",
    TaskStatus.IN_PROGRESS: "In Progress",
    TaskStatus.IN_REVIEW: "In Review",
    TaskStatus.COMPLETED: "Completed",
}


class TaskPriority(str, enum.Enum):
    """任务优先级枚举"""
    LOW = "LOW"          # 低优先级
    MEDIUM = "MEDIUM"    # 中等优先级
    HIGH = "HIGH"        # 高优先级
    URGENT = "URGENT"    # 紧急


class ProjectStatus(str, enum.Enum):
    """项目派生状态枚举（不持久化）"""
    NO_TASKS = "No Tasks"          # 没有任务
    IN_PROGRESS = "In Progress"    # 进行中
    COMPLETED = "Completed"        # 全部完成


class SortOrder(str, enum.Enum):
    """排序方向枚举"""
    ASC = "asc"
    DESC = "desc"
