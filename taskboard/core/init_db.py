from datetime import date, timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.core import database
from taskboard.core.config import settings
from taskboard.core.logging import get_logger
from taskboard.core.security import get_password_hash
from taskboard.models.enums import TaskPriority, TaskStatus
from taskboard.models.project import Project, Team
from taskboard.models.task import Task
from taskboard.models.user import User

logger = get_logger(__name__)

async def create_demo_user(db: AsyncSession) -> User:
    """创建演示用户"""
    result = await db.execute(select(User).where(User.email == settings.DEMO_USER_EMAIL))
    existing = result.scalar_one_or_none()
    if existing:
        logger.info(f"Demo user {settings.DEMO_USER_EMAIL} already exists")
        return existing

    user = User(
        name=settings.DEMO_USER_NAME,
        email=settings.DEMO_USER_EMAIL,
        hashed_password=get_password_hash(settings.DEMO_USER_PASSWORD),
    )
    db.add(user)
    await db.flush()
    logger.info(f"Demo user {settings.DEMO_USER_EMAIL} created")
    return user

async def create_sample_project(db: AsyncSession, user: User) -> None:
    """创建示例团队、项目和任务"""
    result = await db.execute(select(Project.id).limit(1))
    if result.first() is not None:
        logger.info("Projects already exist, skipping sample data")
        return

    team = Team(name="Core Team", description="Default team")
    today = date.today()
    project = Project(
        name="Website Redesign",
        description="Refresh the marketing site",
        start_date=today,
        end_date=today + timedelta(days=30),
        teams=[team],
    )
    project.tasks = [
        Task(title="Collect requirements", status=TaskStatus.COMPLETED, priority=TaskPriority.HIGH,
             start_date=today, due_date=today + timedelta(days=3), points=3, assigned_users=[user]),
        Task(title="Wireframes", status=TaskStatus.IN_REVIEW, priority=TaskPriority.MEDIUM,
             start_date=today + timedelta(days=3), due_date=today + timedelta(days=10), points=5),
        Task(title="Build landing page", status=TaskStatus.IN_PROGRESS, priority=TaskPriority.URGENT,
             tags="frontend", points=8, assigned_users=[user]),
        Task(title="Launch checklist", status=TaskStatus.TO_DO, priority=TaskPriority.LOW),
    ]
    db.add(project)
    logger.info("Sample project created")

async def init_database() -> None:
    """写入演示数据"""
    if database.AsyncSessionLocal is None:
        raise RuntimeError("Database connection not initialized. Call init_db_connection() first.")

    async with database.AsyncSessionLocal() as db:
        try:
            user = await create_demo_user(db)
            await create_sample_project(db, user)
            await db.commit()
        except Exception:
            await db.rollback()
            logger.error("Demo data initialization failed", exc_info=True)
            raise
