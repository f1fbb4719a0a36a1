"""
用户模块业务层
backend/app/services/sys_user_service.py
1. 用户CRUD、密码重置/修改
2. 用户权限聚合：用户 → 角色列表 → 各角色权限编码 → 去重并集
"""
import logging
from typing import Any, List, Optional, Union

from app.core.exceptions import BadRequest, ErrorCode, ResourceNotFound
from app.core.security import get_password_hash, verify_password
from app.models import SysUser
from app.repositories.sys_role_repository import RoleRepository
from app.repositories.sys_user_repository import UserRepository
from app.schemas.responses import PageResult
from app.schemas.sys_user import (
    UserChangePassword, UserCreate, UserOut, UserPermissions, UserResetPassword, UserUpdate
)

logger = logging.getLogger(__name__)


class UserService:
    """用户Service层：仅管业务逻辑，不碰事务/DB操作"""
    def __init__(self, user_repository: UserRepository, role_repository: RoleRepository):
        self.user_repository = user_repository
        self.role_repository = role_repository

    # ------------------------------
    # 核心业务：创建用户
    # ------------------------------
    async def create_user(self, user_in: UserCreate, operator: Optional[str] = None) -> SysUser:
        """创建用户（编码唯一，密码加密后入库）"""
        existing_user = await self.user_repository.get_by_user_code(user_code=user_in.user_code)
        if existing_user:
            raise BadRequest(
                detail=f"User code '{user_in.user_code}' already exists",
                error_code=ErrorCode.USER_CODE_EXISTS
            )

        data = user_in.model_dump(exclude={"password"})
        data.update(
            password=get_password_hash(user_in.password),
            create_by=operator,
            update_by=operator
        )
        async with self.user_repository.transaction() as session:
            user = await self.user_repository.create(data=data, session=session)

        logger.info(f"User created: {user.user_code}")
        return user

    # ------------------------------
    # 基础业务：查询用户
    # ------------------------------
    async def get_user_by_id(self, user_id: Any) -> SysUser:
        """按ID查询用户（不存在则抛异常）"""
        user = await self.user_repository.get_by_id(user_id=user_id)
        if not user:
            raise ResourceNotFound(
                detail=f"User with ID '{user_id}' not found",
                error_code=ErrorCode.USER_NOT_FOUND
            )
        return user

    async def get_user_by_code(self, user_code: str) -> Optional[SysUser]:
        """按编码查询用户（不存在返回None）"""
        return await self.user_repository.get_by_user_code(user_code=user_code)

    async def list_users(self, current: int = 1, size: int = 10, search_key: Optional[str] = None,
                         status: Optional[int] = None) -> PageResult[UserOut]:
        """分页查询用户列表"""
        records, total = await self.user_repository.page(
            search_key=search_key,
            status=status,
            offset=(current - 1) * size,
            limit=size
        )
        return PageResult[UserOut](
            records=[UserOut.model_validate(user) for user in records],
            total=total,
            current=current,
            size=size
        )

    # ------------------------------
    # 基础业务：更新/删除
    # ------------------------------
    async def update_user(self, user_id: Any, user_update: UserUpdate,
                          operator: Optional[str] = None) -> SysUser:
        """更新用户基础信息（含角色）"""
        await self.get_user_by_id(user_id)

        update_data = user_update.model_dump(exclude_unset=True)
        update_data["update_by"] = operator
        async with self.user_repository.transaction() as session:
            updated_user = await self.user_repository.update(user_id=user_id, data=update_data, session=session)
        if not updated_user:
            raise ResourceNotFound(
                detail=f"User with ID '{user_id}' not found",
                error_code=ErrorCode.USER_NOT_FOUND
            )
        return updated_user

    async def delete_user(self, user_id: Any) -> None:
        async with self.user_repository.transaction() as session:
            success = await self.user_repository.delete(user_id=user_id, session=session)
        if not success:
            raise ResourceNotFound(
                detail=f"User with ID '{user_id}' not found",
                error_code=ErrorCode.USER_NOT_FOUND
            )

    async def reset_password(self, user_id: Any, password_in: UserResetPassword,
                             operator: Optional[str] = None) -> None:
        """管理员重置密码"""
        await self.get_user_by_id(user_id)
        async with self.user_repository.transaction() as session:
            await self.user_repository.update(
                user_id=user_id,
                data={"password": get_password_hash(password_in.new_password), "update_by": operator},
                session=session
            )

    async def change_password(self, user: SysUser, password_in: UserChangePassword) -> None:
        """修改个人密码（校验原密码）"""
        if not verify_password(password_in.old_password, user.password):
            raise BadRequest(detail="Incorrect password", error_code=ErrorCode.PASSWORD_INCORRECT)

        async with self.user_repository.transaction() as session:
            await self.user_repository.update(
                user_id=user.id,
                data={"password": get_password_hash(password_in.new_password), "update_by": user.user_code},
                session=session
            )

    # ------------------------------
    # 核心业务：用户权限聚合
    # ------------------------------
    @staticmethod
    def get_user_roles(user: Optional[SysUser]) -> List[str]:
        """用户角色名称列表（已在模型层规范化）"""
        if user is None:
            return []
        return list(user.role_name or [])

    async def get_user_all_permissions(self, user_or_code: Union[SysUser, str, None]) -> List[str]:
        """
        聚合用户所有角色的权限编码

        Args:
            user_or_code: 用户对象或用户编码

        Returns:
            去重后的权限编码（按首次出现顺序），用户不存在或无角色时返回空列表
        """
        if isinstance(user_or_code, str):
            user = await self.user_repository.get_by_user_code(user_code=user_or_code)
        else:
            user = user_or_code

        role_names = self.get_user_roles(user)
        if not role_names:
            return []

        permission_codes: List[str] = []
        seen = set()
        for role_name in role_names:
            for code in await self.role_repository.get_permission_codes(role_name):
                if code not in seen:
                    seen.add(code)
                    permission_codes.append(code)
        return permission_codes

    async def get_user_permissions(self, user: SysUser) -> UserPermissions:
        return UserPermissions(
            user_code=user.user_code,
            role_names=self.get_user_roles(user),
            permission_codes=await self.get_user_all_permissions(user)
        )
