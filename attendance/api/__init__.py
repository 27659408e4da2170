"""API router initialization."""
from fastapi import APIRouter

from .attendance import router as attendance_router

router = APIRouter()

router.include_router(attendance_router, tags=["attendance"])
