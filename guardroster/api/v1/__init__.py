"""API v1 routes."""

from fastapi import APIRouter

from guardroster.api.v1 import auth, health, messages, shifts, uploads, users

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(shifts.router, prefix="/shifts", tags=["shifts"])
router.include_router(messages.router, prefix="/messages", tags=["messages"])
router.include_router(uploads.router, prefix="/uploads", tags=["uploads"])
