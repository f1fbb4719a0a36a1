"""
初始化基础数据 - 针对PostgreSQL + UUID主键
backend/app/scripts/init_data.py
运行：python -m app.scripts.init_data
1. 建表（已存在则跳过）
2. 菜单权限 + 按钮权限（按编码幂等）
3. admin角色（data_scope=ALL，拥有全部权限）
4. admin用户（密码取FIRST_SUPERUSER_PASSWORD）
"""
import asyncio
from pathlib import Path
from typing import Dict, List, Optional

from dotenv import load_dotenv

# 加载.env文件（不存在时使用默认配置）
env_path = Path(__file__).parent.parent.parent.parent / ".env"
if not env_path.exists():
    env_path = Path(__file__).parent.parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)
    print(f"ℹ️ 成功加载.env文件：{env_path}")

from sqlalchemy import insert, select
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from app.core.config import settings
from app.core.security import get_password_hash
from app.enums.sys_permissions import PermissionCode
from app.models import Base, SysPermission, SysRole, SysUser, sys_role_permission
from app.models.sys_permission import PERMISSION_TYPE_BUTTON, PERMISSION_TYPE_MENU
from app.models.sys_role import DATA_SCOPE_ALL

ADMIN_ROLE_NAME = "admin"
SEED_OPERATOR = "system"

# 菜单结构：(编码, 父编码, 路由, 排序)
MENU_TREE = [
    (PermissionCode.SYSTEM, None, None, 0),
    (PermissionCode.SYSTEM_USER, PermissionCode.SYSTEM, "/user", 0),
    (PermissionCode.SYSTEM_PERMISSION, PermissionCode.SYSTEM, "/permission", 1),
    (PermissionCode.SYSTEM_ROLE, PermissionCode.SYSTEM, "/role", 2),
    (PermissionCode.PROJECT, None, None, 1),
    (PermissionCode.PROJECT_PROJECT, PermissionCode.PROJECT, "/project", 0),
]

# 按钮权限挂载的菜单：button:资源:操作 → 资源所在菜单
BUTTON_PARENTS = {
    "user": PermissionCode.SYSTEM_USER,
    "role": PermissionCode.SYSTEM_ROLE,
    "permission": PermissionCode.SYSTEM_PERMISSION,
    "project": PermissionCode.PROJECT_PROJECT,
}


def create_async_db_session():
    async_engine = create_async_engine(
        str(settings.SQLALCHEMY_DATABASE_URI),
        echo=False,
        pool_pre_ping=True,
    )
    return async_engine, sessionmaker(
        bind=async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


def build_seed_permissions() -> List[Dict]:
    """菜单在前、按钮在后，按钮父节点由资源名推导"""
    rows = []
    for perm, parent, path, sort in MENU_TREE:
        rows.append({
            "code": perm.value,
            "name": perm.display_name,
            "menu_name": perm.display_name,
            "parent_code": parent.value if parent else None,
            "type": PERMISSION_TYPE_MENU,
            "path": path,
            "sort": sort,
            "description": perm.description,
        })

    sort_by_parent: Dict[Optional[str], int] = {}
    for perm in PermissionCode.get_all():
        if not perm.is_button:
            continue
        parent = BUTTON_PARENTS[perm.value.split(":")[1]].value
        sort = sort_by_parent.get(parent, 0)
        sort_by_parent[parent] = sort + 1
        rows.append({
            "code": perm.value,
            "name": perm.display_name,
            "parent_code": parent,
            "type": PERMISSION_TYPE_BUTTON,
            "sort": sort,
            "description": perm.description,
        })
    return rows


async def init_sys_permission(session: AsyncSession) -> List[str]:
    print("🔑 初始化权限数据...")
    existing = set((await session.execute(select(SysPermission.code))).scalars().all())

    codes = []
    added_count = 0
    for row in build_seed_permissions():
        codes.append(row["code"])
        if row["code"] in existing:
            continue
        session.add(SysPermission(**row, create_by=SEED_OPERATOR, update_by=SEED_OPERATOR))
        added_count += 1
        print(f"  ✅ 添加权限: {row['code']}")

    await session.flush()
    print(f"✅ 权限数据初始化完成，新增 {added_count} 条记录")
    return codes


async def init_admin_role(session: AsyncSession, permission_codes: List[str]) -> int:
    print("👥 初始化管理员角色...")
    role = (await session.execute(select(SysRole).where(SysRole.name == ADMIN_ROLE_NAME))).scalars().first()
    if role is None:
        session.add(SysRole(
            name=ADMIN_ROLE_NAME,
            description="系统管理员",
            data_scope=[DATA_SCOPE_ALL],
            create_by=SEED_OPERATOR,
            update_by=SEED_OPERATOR
        ))
        await session.flush()
        print(f"  ✅ 添加角色: {ADMIN_ROLE_NAME}")

    granted = set((await session.execute(
        select(sys_role_permission.c.permission_code)
        .where(sys_role_permission.c.role_name == ADMIN_ROLE_NAME)
    )).scalars().all())
    missing = [code for code in permission_codes if code not in granted]
    if missing:
        await session.execute(
            insert(sys_role_permission).values(
                [{"role_name": ADMIN_ROLE_NAME, "permission_code": code} for code in missing]
            )
        )
    print(f"✅ 管理员角色初始化完成，新增 {len(missing)} 条权限关联")
    return len(missing)


async def init_admin_user(session: AsyncSession) -> int:
    print("👤 初始化管理员用户...")
    user_code = settings.FIRST_SUPERUSER
    user = (await session.execute(select(SysUser).where(SysUser.user_code == user_code))).scalars().first()
    if user is not None:
        print(f"  ⏭️ 用户已存在: {user_code}")
        return 0

    session.add(SysUser(
        user_code=user_code,
        user_name="系统管理员",
        password=get_password_hash(settings.FIRST_SUPERUSER_PASSWORD),
        role_name=[ADMIN_ROLE_NAME],
        timezone=settings.DEFAULT_TIMEZONE,
        create_by=SEED_OPERATOR,
        update_by=SEED_OPERATOR
    ))
    print(f"  ✅ 添加用户: {user_code}")
    return 1


async def main():
    print("=" * 60)
    print("🚀 开始初始化基础数据")
    print("=" * 60)

    async_engine, async_session_factory = create_async_db_session()
    try:
        async with async_engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        async with async_session_factory() as session:
            async with session.begin():
                permission_codes = await init_sys_permission(session)
                role_perm_count = await init_admin_role(session, permission_codes)
                user_count = await init_admin_user(session)
    finally:
        await async_engine.dispose()

    print("=" * 60)
    print("🎉 基础数据初始化完成！")
    print(f"  🔑 权限: {len(permission_codes)} 条")
    print(f"  🔗 角色权限关联: 新增 {role_perm_count} 条")
    print(f"  👤 用户: 新增 {user_count} 条")
    print(f"  账号：{settings.FIRST_SUPERUSER}")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
