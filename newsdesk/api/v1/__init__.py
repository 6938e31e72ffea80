"""API v1 routes."""

from fastapi import APIRouter

from newsdesk.api.v1 import auth, comments, health, users

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(comments.router, prefix="/comments", tags=["comments"])
router.include_router(users.router, prefix="/users", tags=["users"])
