"""
数据范围业务层
backend/app/services/sys_data_scope_service.py
按请求实时解析，不持久化“当前范围”
"""
import logging
from typing import List, Optional

from app.models.sys_role import DATA_SCOPE_ALL
from app.repositories.sys_role_repository import RoleRepository
from app.repositories.sys_user_repository import UserRepository
from app.utils.data_scope import ProjectScope, merge_data_scopes

logger = logging.getLogger(__name__)


class DataScopeService:
    def __init__(self, user_repository: UserRepository, role_repository: RoleRepository):
        self.user_repository = user_repository
        self.role_repository = role_repository

    async def resolve_project_filter(self, user_code: str) -> ProjectScope:
        """
        解析用户的项目数据范围：
        用户 → 角色名称 → 各角色data_scope → 合并
        用户不存在、无角色、角色不存在均视为无数据，回落到owned
        """
        user = await self.user_repository.get_by_user_code(user_code=user_code)
        role_names: List[str] = list(user.role_name or []) if user else []

        role_scopes: List[Optional[List[str]]] = []
        for role_name in role_names:
            role = await self.role_repository.get_by_name(name=role_name)
            if role is None:
                continue
            role_scopes.append(role.data_scope)
            # ALL无需继续查询其余角色
            if role.data_scope and DATA_SCOPE_ALL in role.data_scope:
                break

        scope = merge_data_scopes(role_scopes)
        logger.debug(f"Project scope resolved for {user_code}: {scope.kind.value}")
        return scope
