"""
权限模块业务层
backend/app/services/sys_permission_service.py
1. 权限增删改查
2. 管理端权限树/子树（全部状态、全部类型）
3. 用户菜单树（启用菜单 → 授权过滤 → 祖先补齐 → 建树）与按钮权限
每次调用都重新读取权限表，不缓存树结构
"""
import logging
from typing import Any, Iterable, List, Optional

from app.core.exceptions import BadRequest, ErrorCode, ResourceNotFound
from app.models import SysPermission
from app.repositories.sys_permission_repository import PermissionRepository
from app.schemas.responses import PageResult
from app.schemas.sys_permission import PermissionCreate, PermissionOut, PermissionTreeNode, PermissionUpdate
from app.utils.permission_tree import build_tree, filter_button_codes, filter_user_menu_nodes

logger = logging.getLogger(__name__)


class PermissionService:
    """权限Service层：权限管理与权限树"""
    def __init__(self, permission_repository: PermissionRepository):
        self.permission_repository = permission_repository

    # ------------------------------
    # 基础业务：权限CRUD
    # ------------------------------
    async def create_permission(self, perm_in: PermissionCreate, operator: Optional[str] = None) -> SysPermission:
        """创建权限（编码唯一）"""
        existing = await self.permission_repository.get_by_code(code=perm_in.code)
        if existing:
            raise BadRequest(
                detail=f"Permission code '{perm_in.code}' already exists",
                error_code=ErrorCode.PERMISSION_CODE_EXISTS
            )

        data = perm_in.model_dump()
        data.update(create_by=operator, update_by=operator)
        async with self.permission_repository.transaction() as session:
            perm = await self.permission_repository.create(data=data, session=session)

        logger.info(f"Permission created: {perm.code}")
        return perm

    async def get_permission_by_id(self, perm_id: Any) -> SysPermission:
        """按ID查询权限（不存在则抛异常）"""
        perm = await self.permission_repository.get_by_id(perm_id=perm_id)
        if not perm:
            raise ResourceNotFound(
                detail=f"Permission with ID '{perm_id}' not found",
                error_code=ErrorCode.PERMISSION_NOT_FOUND
            )
        return perm

    async def list_permissions(self, current: int = 1, size: int = 10,
                               search_key: Optional[str] = None) -> PageResult[PermissionOut]:
        """分页查询权限列表"""
        records, total = await self.permission_repository.page(
            search_key=search_key,
            offset=(current - 1) * size,
            limit=size
        )
        return PageResult[PermissionOut](
            records=[PermissionOut.model_validate(perm) for perm in records],
            total=total,
            current=current,
            size=size
        )

    async def update_permission(self, perm_id: Any, perm_update: PermissionUpdate,
                                operator: Optional[str] = None) -> SysPermission:
        """更新权限（编码创建后不可修改，角色授权与子节点均按编码关联）"""
        await self.get_permission_by_id(perm_id)

        update_data = perm_update.model_dump(exclude_unset=True)
        update_data["update_by"] = operator
        async with self.permission_repository.transaction() as session:
            updated = await self.permission_repository.update(perm_id=perm_id, data=update_data, session=session)
        if not updated:
            raise ResourceNotFound(
                detail=f"Permission with ID '{perm_id}' not found",
                error_code=ErrorCode.PERMISSION_NOT_FOUND
            )
        return updated

    async def delete_permission(self, perm_id: Any) -> None:
        async with self.permission_repository.transaction() as session:
            success = await self.permission_repository.delete(perm_id=perm_id, session=session)
        if not success:
            raise ResourceNotFound(
                detail=f"Permission with ID '{perm_id}' not found",
                error_code=ErrorCode.PERMISSION_NOT_FOUND
            )

    # ------------------------------
    # 核心业务：权限树
    # ------------------------------
    async def get_permission_tree(self) -> List[PermissionTreeNode]:
        """管理端完整权限树（不过滤状态和类型）"""
        nodes = await self.permission_repository.list_all()
        return build_tree(nodes)

    async def get_permission_sub_tree(self, parent_code: str) -> List[PermissionTreeNode]:
        """以parent_code为父节点的子树，未知编码返回空列表"""
        nodes = await self.permission_repository.list_all()
        return build_tree(nodes, parent_code)

    async def get_user_permission_tree(self, permission_codes: Iterable[str]) -> List[PermissionTreeNode]:
        """
        用户菜单树：
        1. 读取启用的菜单权限（已按sort、create_time排序）
        2. 过滤出直接授权的节点并补齐祖先
        3. 按原顺序过滤后建树
        授权了但已禁用/非菜单/不存在的编码直接忽略
        """
        codes = list(permission_codes)
        if not codes:
            return []

        menus = await self.permission_repository.list_enabled_menus()
        visible = filter_user_menu_nodes(menus, codes)
        return build_tree(visible)

    async def get_user_button_permissions(self, permission_codes: Iterable[str]) -> List[str]:
        """用户按钮权限编码（非菜单类型，不建树）"""
        codes = list(permission_codes)
        if not codes:
            return []

        buttons = await self.permission_repository.list_enabled_buttons()
        return filter_button_codes(buttons, codes)
