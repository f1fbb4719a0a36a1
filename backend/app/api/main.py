"""
API模块统一入口
backend/app/api/main.py
"""
from fastapi import APIRouter

from app.api.v1.endpoints import login, users, roles, permissions, projects

api_router = APIRouter()
api_router.include_router(login.router)
api_router.include_router(users.router)
api_router.include_router(roles.router)
api_router.include_router(permissions.router)
api_router.include_router(projects.router)
