"""
模型统一导出入口
作用：
1. 集中管理所有模型导入，避免散落在业务代码中的重复导入
2. 统一导出所有模型，简化业务层导入（如：from app.models import SysUser）

遵循原则：
- import顺序：先导入"被依赖的底层模型"，后导入"依赖它的上层模型"
- __all__顺序：与import顺序保持一致

backend/app/models/__init__.py
"""
from app.models.base import Base

# 权限 → 角色（含角色权限关联表） → 用户 → 项目/项目成员
from app.models.sys_permission import SysPermission
from app.models.sys_role import SysRole, sys_role_permission
from app.models.sys_user import SysUser
from app.models.project import Project, ProjectMember

__all__ = [
    # 基础类
    'Base',
    # 核心模型（按导入顺序）
    'SysPermission',
    'SysRole',
    'SysUser',
    'Project',
    'ProjectMember',
    # 关联表
    'sys_role_permission',
]
