"""
DI容器
项目核心框架文件
backend/app/di/container.py
"""
from dependency_injector import containers, providers
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
import redis.asyncio as redis

from app.repositories.sys_user_repository import UserRepository
from app.repositories.sys_permission_repository import PermissionRepository
from app.repositories.sys_role_repository import RoleRepository
from app.repositories.project_repository import ProjectRepository

from app.services.redis_service import RedisService
from app.services.sys_user_service import UserService
from app.services.sys_permission_service import PermissionService
from app.services.sys_role_service import RoleService
from app.services.sys_data_scope_service import DataScopeService
from app.services.sys_auth_service import AuthService
from app.services.project_service import ProjectService
from app.services.permission_push_service import PermissionPushService

from app.core.config import settings


class Container(containers.DeclarativeContainer):

    # 1. 底层：数据库引擎（单例，全局唯一）
    async_engine = providers.Singleton(
        create_async_engine,
        str(settings.SQLALCHEMY_DATABASE_URI),
        echo=False,
        pool_pre_ping=settings.DB_POOL_PRE_PING,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_recycle=settings.DB_POOL_RECYCLE,
    )

    # 2. 会话工厂（单例，Repo在自身事务上下文中创建会话）
    async_session_factory = providers.Singleton(
        sessionmaker,
        bind=async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False
    )

    # 3. 异步Redis客户端（单例，连接池由客户端内部管理）
    redis_client = providers.Singleton(
        redis.from_url,
        settings.REDIS_URL,
        encoding=settings.REDIS_ENCODING,
        decode_responses=settings.REDIS_DECODE_RESPONSES,
        max_connections=settings.REDIS_MAX_CONNECTIONS,
        socket_keepalive=True,
        socket_timeout=settings.REDIS_SOCKET_TIMEOUT,
        socket_connect_timeout=settings.REDIS_SOCKET_CONNECT_TIMEOUT,
    )

    redis_service = providers.Factory(
        RedisService,
        redis_client=redis_client
    )

    # 4. Repo层：注入会话工厂
    user_repository = providers.Factory(
        UserRepository,
        async_session_factory=async_session_factory
    )
    permission_repository = providers.Factory(
        PermissionRepository,
        async_session_factory=async_session_factory
    )
    role_repository = providers.Factory(
        RoleRepository,
        async_session_factory=async_session_factory
    )
    project_repository = providers.Factory(
        ProjectRepository,
        async_session_factory=async_session_factory
    )

    # 5. Service层：注入Repo
    user_service = providers.Factory(
        UserService,
        user_repository=user_repository,
        role_repository=role_repository
    )
    permission_service = providers.Factory(
        PermissionService,
        permission_repository=permission_repository
    )
    role_service = providers.Factory(
        RoleService,
        role_repository=role_repository,
        permission_repository=permission_repository,
        user_repository=user_repository
    )
    data_scope_service = providers.Factory(
        DataScopeService,
        user_repository=user_repository,
        role_repository=role_repository
    )
    project_service = providers.Factory(
        ProjectService,
        project_repository=project_repository,
        user_repository=user_repository,
        data_scope_service=data_scope_service
    )
    auth_service = providers.Factory(
        AuthService,
        user_repository=user_repository,
        user_service=user_service,
        permission_service=permission_service,
        redis_service=redis_service
    )

    # 6. 权限推送：进程内单例，持有WebSocket连接表
    permission_push_service = providers.Singleton(
        PermissionPushService,
        user_service=user_service,
        permission_service=permission_service
    )

    # 7. 模块扫描
    wiring_config = containers.WiringConfiguration(
        modules=[
            "app.api.v1.endpoints.login",
            "app.api.v1.endpoints.users",
            "app.api.v1.endpoints.roles",
            "app.api.v1.endpoints.permissions",
            "app.api.v1.endpoints.projects",
            "app.api.v1.endpoints.ws",
            "app.api.deps",
            "app.utils.permission_checker",
        ]
    )
