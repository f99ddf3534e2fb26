from fastapi import APIRouter

from litejira.api.v1.admin import router as admin_router
from litejira.api.v1.auth import router as auth_router
from litejira.api.v1.comments import router as comments_router
from litejira.api.v1.projects import router as projects_router
from litejira.api.v1.reports import router as reports_router
from litejira.api.v1.tasks import router as tasks_router

v1_router = APIRouter()

v1_router.include_router(auth_router)
v1_router.include_router(projects_router)
v1_router.include_router(tasks_router)
v1_router.include_router(comments_router)
v1_router.include_router(reports_router)
v1_router.include_router(admin_router)
