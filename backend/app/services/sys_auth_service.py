"""
认证业务层
backend/app/services/sys_auth_service.py
登录、刷新令牌、令牌解析当前用户
刷新令牌以 refresh_token:{user_code} 存Redis，每次刷新轮换
"""
import logging
from typing import Optional

from jose import JWTError

from app.core import security
from app.core.config import settings
from app.core.exceptions import ErrorCode, Unauthorized
from app.models import SysUser
from app.repositories.sys_user_repository import UserRepository
from app.schemas.sys_user import LoginResult, Token, UserOut
from app.services.redis_service import RedisService
from app.services.sys_permission_service import PermissionService
from app.services.sys_user_service import UserService

logger = logging.getLogger(__name__)


class AuthService:
    """认证Service层：处理用户登录、Token校验"""
    def __init__(self, user_repository: UserRepository,
                 user_service: UserService,
                 permission_service: PermissionService,
                 redis_service: RedisService):
        self.user_repository = user_repository
        self.user_service = user_service
        self.permission_service = permission_service
        self.redis_service = redis_service

    # ------------------------------
    # 核心业务：用户认证（登录）
    # ------------------------------
    async def authenticate_user(self, user_code: str, password: str) -> Optional[SysUser]:
        """
        认证用户：
        1. 按用户编码查询用户
        2. 校验密码
        认证失败返回None，禁用状态由调用方判断
        """
        user = await self.user_repository.get_by_user_code(user_code=user_code)
        if not user:
            return None
        if not security.verify_password(password, user.password):
            return None
        return user

    async def _issue_tokens(self, user_code: str) -> Token:
        access_token = security.create_access_token(user_code)
        refresh_token = security.create_refresh_token(data={"sub": user_code})
        await self.redis_service.cache_refresh_token(
            user_code, refresh_token, settings.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 3600
        )
        return Token(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60
        )

    async def login(self, user_code: str, password: str) -> LoginResult:
        """登录：签发令牌，并返回用户信息、菜单树、按钮权限"""
        user = await self.authenticate_user(user_code, password)
        if not user:
            logger.warning(f"Login failed for {user_code}")
            raise Unauthorized(detail="Incorrect user code or password", error_code=ErrorCode.INVALID_CREDENTIALS)
        if not user.is_active:
            raise Unauthorized(detail="Inactive user", error_code=ErrorCode.USER_DISABLED)

        token = await self._issue_tokens(user.user_code)
        permission_codes = await self.user_service.get_user_all_permissions(user)

        logger.info(f"User logged in: {user.user_code}")
        return LoginResult(
            **token.model_dump(),
            user=UserOut.model_validate(user),
            permissions=await self.permission_service.get_user_permission_tree(permission_codes),
            button_permissions=await self.permission_service.get_user_button_permissions(permission_codes)
        )

    async def refresh(self, refresh_token: str) -> Token:
        """
        刷新令牌：
        1. 令牌有效且类型为refresh
        2. 与Redis中保存的令牌一致
        3. 用户存在且启用
        通过后签发新访问令牌并轮换刷新令牌
        """
        try:
            user_code = security.extract_token_subject(refresh_token, expected_type=security.REFRESH_TOKEN_TYPE)
        except JWTError as e:
            raise Unauthorized(detail=f"Invalid refresh token: {e}", error_code=ErrorCode.TOKEN_INVALID)

        cached_token = await self.redis_service.get_refresh_token(user_code)
        if cached_token != refresh_token:
            raise Unauthorized(detail="Refresh token expired or revoked", error_code=ErrorCode.TOKEN_INVALID)

        user = await self.user_repository.get_by_user_code(user_code=user_code)
        if not user or not user.is_active:
            await self.redis_service.delete_refresh_token(user_code)
            raise Unauthorized(detail="Inactive or unknown user", error_code=ErrorCode.USER_DISABLED)

        return await self._issue_tokens(user_code)

    async def logout(self, user_code: str) -> None:
        await self.redis_service.delete_refresh_token(user_code)

    # ------------------------------
    # 核心业务：Token解析获取当前用户
    # ------------------------------
    async def get_current_user(self, token: str) -> SysUser:
        """
        从访问令牌获取当前用户：
        1. 解析Token（类型必须为access）
        2. 按user_code查询用户
        3. 校验用户启用状态
        """
        try:
            user_code = security.extract_token_subject(token)
        except JWTError as e:
            raise Unauthorized(
                detail=f"Could not validate credentials: {str(e).split(chr(10))[0]}",
                error_code=ErrorCode.TOKEN_INVALID
            )

        user = await self.user_repository.get_by_user_code(user_code=user_code)
        if not user:
            raise Unauthorized(detail=f"User '{user_code}' not found", error_code=ErrorCode.USER_NOT_FOUND)
        if not user.is_active:
            raise Unauthorized(detail="Inactive user", error_code=ErrorCode.USER_DISABLED)
        return user
