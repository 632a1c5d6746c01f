from fastapi import APIRouter

from taskboard.api.v1.endpoints import auth, users, projects, teams, tasks, commands

api_router = APIRouter()

# 认证相关路由
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])

# 用户管理路由
api_router.include_router(users.router, prefix="/users", tags=["users"])

# 项目管理路由
api_router.include_router(projects.router, prefix="/projects", tags=["projects"])

# 团队路由
api_router.include_router(teams.router, prefix="/teams", tags=["teams"])

# 任务管理路由
api_router.include_router(tasks.router, prefix="/tasks", tags=["tasks"])

# 命令路由
api_router.include_router(commands.router, prefix="/commands", tags=["commands"])
