"""API v1 router configuration."""

from fastapi import APIRouter

from api.v1.routes.auth import router as auth_router
from api.v1.routes.todo_lists import router as todo_lists_router
from api.v1.routes.todo_tasks import router as todo_tasks_router
from api.v1.routes.todo_tasks import user_tasks_router
from api.v1.routes.users import router as users_router

router = APIRouter()
router.include_router(auth_router)
router.include_router(users_router)
router.include_router(todo_lists_router)
router.include_router(todo_tasks_router)
router.include_router(user_tasks_router)
