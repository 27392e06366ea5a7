"""
Central API router that aggregates all route modules.
"""

from fastapi import APIRouter
from passgate.api.routes import entry

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(entry.router)
