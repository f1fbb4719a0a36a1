"""
权限校验工具文件
backend/app/utils/permission_checker.py
核心功能：
1. 支持权限通配符匹配（a:b:c → a:b:* → a:*:*；a:b → a:*）
2. 用户权限 = 所属全部角色权限编码的去重并集
3. 日志关联请求上下文，用户编码脱敏
"""
import hashlib
import logging
from typing import Awaitable, Callable, List

from fastapi import Depends
from dependency_injector.wiring import inject, Provide

from app.api.deps import CurrentUser
from app.core.exceptions import ErrorCode, PermissionDenied
from app.core.logger import request_id_ctx
from app.di.container import Container
from app.services.sys_user_service import UserService

logger = logging.getLogger(__name__)

__all__ = ["permission_checker", "get_current_user_permissions", "generate_permission_wildcards"]


# ====================== 工具函数 ======================
def generate_permission_wildcards(required_perm: str) -> List[str]:
    """
    生成权限通配符列表
    :param required_perm: 原始权限码（如 button:user:create）
    :return: 通配符列表（首项为原权限码）
    """
    if not required_perm:
        logger.warning(
            "所需权限码为空，无法生成通配符",
            extra={"request_id": request_id_ctx.get()}
        )
        return []

    # 无分隔符的权限码只做精确匹配
    if ":" not in required_perm:
        return [required_perm]

    perm_parts = required_perm.split(':')
    wildcards = [required_perm]
    if len(perm_parts) >= 3:
        wildcards.append(f"{perm_parts[0]}:{perm_parts[1]}:*")
        wildcards.append(f"{perm_parts[0]}:*:*")
    elif len(perm_parts) == 2:
        wildcards.append(f"{perm_parts[0]}:*")
    return wildcards


def desensitize_user_code(user_code: str) -> str:
    """
    用户编码脱敏
    :return: 短编码取MD5前8位，长编码保留前6位+后4位
    """
    if len(user_code) <= 10:
        return hashlib.md5(user_code.encode()).hexdigest()[:8]
    return f"{user_code[:6]}...{user_code[-4:]}"


def is_permitted(required_perm: str, user_perms: List[str]) -> bool:
    granted = set(user_perms)
    return any(perm in granted for perm in generate_permission_wildcards(required_perm))


# ====================== 当前用户权限 ======================
@inject
async def get_current_user_permissions(
    current_user: CurrentUser,
    user_service: UserService = Depends(Provide[Container.user_service])
) -> List[str]:
    """当前用户聚合后的权限编码"""
    return await user_service.get_user_all_permissions(current_user)


# ====================== 权限校验工厂函数 ======================
def permission_checker(required_perm: str) -> Callable[..., Awaitable[bool]]:
    """
    权限验证工厂函数

    :param required_perm: 所需权限码（如 button:user:create）
    :return: FastAPI依赖注入函数，权限不足时抛出403
    """
    wildcards = generate_permission_wildcards(required_perm)

    async def checker(
        current_user: CurrentUser,
        user_perms: List[str] = Depends(get_current_user_permissions)
    ) -> bool:
        request_id = request_id_ctx.get()
        masked_code = desensitize_user_code(current_user.user_code)

        if not is_permitted(required_perm, user_perms):
            logger.warning(
                f"用户权限不足 | 用户：{masked_code} | 所需权限：{required_perm} | 支持通配符：{wildcards}",
                extra={"request_id": request_id}
            )
            raise PermissionDenied(
                detail=f"Permission '{required_perm}' required",
                error_code=ErrorCode.FORBIDDEN
            )

        logger.debug(
            f"用户权限校验通过 | 用户：{masked_code} | 所需权限：{required_perm}",
            extra={"request_id": request_id}
        )
        return True

    return checker
