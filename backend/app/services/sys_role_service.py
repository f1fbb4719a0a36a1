"""
角色模块业务层
backend/app/services/sys_role_service.py
"""
import logging
from typing import Any, List, Optional

from app.core.exceptions import BadRequest, ErrorCode, ResourceNotFound
from app.models import SysRole
from app.repositories.sys_permission_repository import PermissionRepository
from app.repositories.sys_role_repository import RoleRepository
from app.repositories.sys_user_repository import UserRepository
from app.schemas.responses import PageResult
from app.schemas.sys_role import RoleCreate, RoleOut, RoleUpdate

logger = logging.getLogger(__name__)


class RoleService:
    """角色Service层：仅管业务逻辑"""
    def __init__(
            self,
            role_repository: RoleRepository,
            permission_repository: PermissionRepository,
            user_repository: UserRepository):
        self.role_repository = role_repository
        self.permission_repository = permission_repository
        self.user_repository = user_repository

    async def _to_out(self, role: SysRole) -> RoleOut:
        role_out = RoleOut.model_validate(role)
        role_out.permission_codes = await self.role_repository.get_permission_codes(role.name)
        return role_out

    async def _check_permission_codes(self, permission_codes: Optional[List[str]]) -> None:
        """权限编码有效性校验"""
        if not permission_codes:
            return
        existing = await self.permission_repository.get_existing_codes(permission_codes)
        invalid = [code for code in permission_codes if code not in existing]
        if invalid:
            raise BadRequest(
                detail=f"Invalid permission codes: {', '.join(invalid)}",
                error_code=ErrorCode.PERMISSION_NOT_FOUND
            )

    # ------------------------------
    # 核心业务：创建角色
    # ------------------------------
    async def create_role(self, role_in: RoleCreate, operator: Optional[str] = None) -> RoleOut:
        """创建角色（含权限分配）"""
        # 1. 角色名称唯一
        existing_role = await self.role_repository.get_by_name(name=role_in.name)
        if existing_role:
            raise BadRequest(
                detail=f"Role name '{role_in.name}' already exists",
                error_code=ErrorCode.ROLE_NAME_EXISTS
            )

        # 2. 权限编码有效
        await self._check_permission_codes(role_in.permission_codes)

        # 3. 同一事务内创建角色+写入关联
        data = role_in.model_dump(exclude={"permission_codes"})
        data.update(create_by=operator, update_by=operator)
        async with self.role_repository.transaction() as session:
            new_role = await self.role_repository.create(
                data=data,
                permission_codes=role_in.permission_codes,
                session=session
            )

        logger.info(f"Role created: {new_role.name}")
        return await self._to_out(new_role)

    # ------------------------------
    # 基础业务：查询角色
    # ------------------------------
    async def get_role_by_id(self, role_id: Any) -> SysRole:
        """按ID查询角色（不存在则抛异常）"""
        role = await self.role_repository.get_by_id(role_id=role_id)
        if not role:
            raise ResourceNotFound(
                detail=f"Role with ID '{role_id}' not found",
                error_code=ErrorCode.ROLE_NOT_FOUND
            )
        return role

    async def get_role_detail(self, role_id: Any) -> RoleOut:
        return await self._to_out(await self.get_role_by_id(role_id))

    async def list_roles(self, current: int = 1, size: int = 10,
                         search_key: Optional[str] = None) -> PageResult[RoleOut]:
        """分页查询角色列表"""
        records, total = await self.role_repository.page(
            search_key=search_key,
            offset=(current - 1) * size,
            limit=size
        )
        return PageResult[RoleOut](
            records=[await self._to_out(role) for role in records],
            total=total,
            current=current,
            size=size
        )

    async def get_permissions_by_role_name(self, role_name: str) -> List[str]:
        """角色的权限编码列表（角色不存在返回空列表）"""
        return await self.role_repository.get_permission_codes(role_name)

    # ------------------------------
    # 基础业务：更新角色
    # ------------------------------
    async def update_role(self, role_id: Any, role_update: RoleUpdate,
                          operator: Optional[str] = None) -> RoleOut:
        """
        更新角色：
        1. 更新基础字段（改名时校验唯一，并迁移权限关联与用户的角色名）
        2. 传入permission_codes时整体替换权限（先删后插），与基础字段同一事务
        """
        role = await self.get_role_by_id(role_id=role_id)
        old_name = role.name

        update_data = role_update.model_dump(exclude_unset=True)
        permission_codes = update_data.pop("permission_codes", None)
        replace_permissions = "permission_codes" in role_update.model_fields_set and permission_codes is not None

        new_name = update_data.get("name")
        if new_name and new_name != role.name:
            existing_role = await self.role_repository.get_by_name(name=new_name)
            if existing_role:
                raise BadRequest(
                    detail=f"Role name '{new_name}' already exists",
                    error_code=ErrorCode.ROLE_NAME_EXISTS
                )

        if replace_permissions:
            await self._check_permission_codes(permission_codes)

        update_data["update_by"] = operator
        async with self.role_repository.transaction() as session:
            updated_role = await self.role_repository.update(role_id=role_id, data=update_data, session=session)
            if updated_role is None:
                raise ResourceNotFound(
                    detail=f"Role with ID '{role_id}' not found",
                    error_code=ErrorCode.ROLE_NOT_FOUND
                )
            if updated_role.name != old_name:
                await self.user_repository.replace_role_name(old_name, updated_role.name, session=session)
                logger.info(f"Role renamed: {old_name} -> {updated_role.name}")
            if replace_permissions:
                await self.role_repository.assign_permissions(
                    role_name=updated_role.name,
                    permission_codes=permission_codes,
                    session=session
                )

        return await self._to_out(updated_role)

    # ------------------------------
    # 基础业务：删除角色
    # ------------------------------
    async def delete_role(self, role_id: Any) -> SysRole:
        """删除角色（同一事务内级联删除角色权限关联）"""
        async with self.role_repository.transaction() as session:
            role = await self.role_repository.delete(role_id=role_id, session=session)
        if role is None:
            raise ResourceNotFound(
                detail=f"Role with ID '{role_id}' not found",
                error_code=ErrorCode.ROLE_NOT_FOUND
            )
        logger.info(f"Role deleted: {role.name}")
        return role

    async def get_affected_user_codes(self, role_name: str) -> List[str]:
        """持有该角色的用户（角色权限变更后用于推送）"""
        return await self.user_repository.list_user_codes_by_role(role_name)
