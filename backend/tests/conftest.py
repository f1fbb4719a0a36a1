"""
测试公共夹具
backend/tests/conftest.py
Service层测试使用内存版Repo，接口与真实Repo保持一致（transaction / 查询 / 写入）
"""
import os

# 降低bcrypt轮数，加快测试（需在导入app之前设置）
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-pytest-only")

import uuid
from contextlib import asynccontextmanager
from datetime import date
from typing import Any, Dict, List, Optional

import pytest

from app.core.security import get_password_hash
from app.models import Project, ProjectMember, SysPermission, SysRole, SysUser
from app.models.sys_permission import PERMISSION_TYPE_BUTTON, PERMISSION_TYPE_MENU
from app.services.project_service import ProjectService
from app.services.sys_auth_service import AuthService
from app.services.sys_data_scope_service import DataScopeService
from app.services.sys_permission_service import PermissionService
from app.services.sys_role_service import RoleService
from app.services.sys_user_service import UserService

TEST_PASSWORD = "secret123"


# ====================== 模型构造 ======================
def make_permission(code: str, parent_code: Optional[str] = None, type: Optional[str] = PERMISSION_TYPE_MENU,
                    sort: int = 0, status: int = 1, name: Optional[str] = None) -> SysPermission:
    return SysPermission(
        id=uuid.uuid4(),
        code=code,
        name=name or code,
        parent_code=parent_code,
        type=type,
        sort=sort,
        status=status,
        module=code.split(":")[0],
        description="",
    )


def make_user(user_code: str, role_name: Any = None, status: int = 1,
              password: str = TEST_PASSWORD, user_name: Optional[str] = None) -> SysUser:
    return SysUser(
        id=uuid.uuid4(),
        user_code=user_code,
        user_name=user_name or user_code,
        password=get_password_hash(password),
        role_name=role_name,
        status=status,
    )


def make_role(name: str, data_scope: Any = None) -> SysRole:
    return SysRole(id=uuid.uuid4(), name=name, data_scope=data_scope)


def make_project(project_code: str, manager_user_code: str, director_user_code: Optional[str] = None) -> Project:
    return Project(
        id=uuid.uuid4(),
        project_code=project_code,
        project_name=f"项目{project_code}",
        manager_user_code=manager_user_code,
        director_user_code=director_user_code,
        status=1,
    )


def make_member(project_code: str, user_code: str, role: Optional[str] = None,
                join_date: Optional[date] = None) -> ProjectMember:
    return ProjectMember(
        id=uuid.uuid4(),
        project_code=project_code,
        user_code=user_code,
        role=role,
        join_date=join_date,
    )


# ====================== 内存版Repo ======================
class FakeTransactionMixin:
    """内存Repo无真实会话，transaction只提供同样的上下文接口"""

    @asynccontextmanager
    async def transaction(self):
        yield None


class FakePermissionRepository(FakeTransactionMixin):
    def __init__(self, nodes: List[SysPermission]):
        self.nodes = list(nodes)

    def _ordered(self, nodes):
        # 与真实Repo一致：sort升序，同sort保持创建顺序
        return sorted(nodes, key=lambda node: node.sort or 0)

    async def get_by_id(self, perm_id):
        return next((node for node in self.nodes if node.id == perm_id), None)

    async def get_by_code(self, code):
        return next((node for node in self.nodes if node.code == code), None)

    async def get_existing_codes(self, codes):
        wanted = set(codes)
        return {node.code for node in self.nodes if node.code in wanted}

    async def list_all(self):
        return self._ordered(self.nodes)

    async def list_enabled_menus(self):
        return self._ordered([n for n in self.nodes if n.status == 1 and n.type == PERMISSION_TYPE_MENU])

    async def list_enabled_buttons(self):
        return self._ordered([n for n in self.nodes if n.status == 1 and n.type != PERMISSION_TYPE_MENU])

    async def page(self, search_key=None, offset=0, limit=10):
        records = [
            node for node in self.nodes
            if not search_key or search_key in node.code or search_key in node.name
        ]
        return records[offset:offset + limit], len(records)

    async def create(self, data, session=None):
        node = SysPermission(id=uuid.uuid4(), **data)
        self.nodes.append(node)
        return node

    async def update(self, perm_id, data, session=None):
        node = await self.get_by_id(perm_id)
        if node is None:
            return None
        for key, value in data.items():
            setattr(node, key, value)
        return node

    async def delete(self, perm_id, session=None):
        node = await self.get_by_id(perm_id)
        if node is None:
            return False
        self.nodes.remove(node)
        return True


class FakeRoleRepository(FakeTransactionMixin):
    def __init__(self, roles: List[SysRole], grants: Dict[str, List[str]]):
        self.roles = list(roles)
        self.grants = {name: list(codes) for name, codes in grants.items()}

    async def get_by_name(self, name):
        return next((role for role in self.roles if role.name == name), None)

    async def get_by_id(self, role_id):
        return next((role for role in self.roles if role.id == role_id), None)

    async def page(self, search_key=None, offset=0, limit=10):
        records = [role for role in self.roles if not search_key or search_key in role.name]
        return records[offset:offset + limit], len(records)

    async def get_permission_codes(self, role_name):
        return sorted(self.grants.get(role_name, []))

    async def create(self, data, permission_codes=None, session=None):
        role = SysRole(id=uuid.uuid4(), **data)
        self.roles.append(role)
        self.grants[role.name] = list(dict.fromkeys(permission_codes or []))
        return role

    async def assign_permissions(self, role_name, permission_codes, session=None):
        self.grants[role_name] = list(dict.fromkeys(permission_codes))

    async def update(self, role_id, data, session=None):
        role = await self.get_by_id(role_id)
        if role is None:
            return None
        old_name = role.name
        for key, value in data.items():
            setattr(role, key, value)
        if role.name != old_name:
            self.grants[role.name] = self.grants.pop(old_name, [])
        return role

    async def delete(self, role_id, session=None):
        role = await self.get_by_id(role_id)
        if role is None:
            return None
        self.roles.remove(role)
        self.grants.pop(role.name, None)
        return role


class FakeUserRepository(FakeTransactionMixin):
    def __init__(self, users: List[SysUser]):
        self.users = list(users)

    async def get_by_user_code(self, user_code):
        return next((user for user in self.users if user.user_code == user_code), None)

    async def get_by_id(self, user_id):
        return next((user for user in self.users if user.id == user_id), None)

    async def get_by_user_codes(self, user_codes):
        wanted = {code for code in user_codes if code}
        return [user for user in self.users if user.user_code in wanted]

    async def list_user_codes_by_role(self, role_name):
        return [user.user_code for user in self.users if role_name in (user.role_name or [])]

    async def page(self, search_key=None, status=None, offset=0, limit=10):
        records = [
            user for user in self.users
            if (not search_key or search_key in user.user_code or search_key in user.user_name)
            and (status is None or user.status == status)
        ]
        return records[offset:offset + limit], len(records)

    async def create(self, data, session=None):
        user = SysUser(id=uuid.uuid4(), **data)
        self.users.append(user)
        return user

    async def update(self, user_id, data, session=None):
        user = await self.get_by_id(user_id)
        if user is None:
            return None
        for key, value in data.items():
            setattr(user, key, value)
        return user

    async def replace_role_name(self, old_name, new_name, session=None):
        user_codes = []
        for user in self.users:
            if old_name in (user.role_name or []):
                user.role_name = list(dict.fromkeys(new_name if name == old_name else name for name in user.role_name))
                user_codes.append(user.user_code)
        return user_codes

    async def delete(self, user_id, session=None):
        user = await self.get_by_id(user_id)
        if user is None:
            return False
        self.users.remove(user)
        return True


class FakeProjectRepository(FakeTransactionMixin):
    def __init__(self, projects: List[Project], members: Optional[List[ProjectMember]] = None):
        self.projects = list(projects)
        self.members = list(members or [])

    async def get_by_id(self, project_id):
        return next((p for p in self.projects if p.id == project_id), None)

    async def get_by_code(self, project_code):
        return next((p for p in self.projects if p.project_code == project_code), None)

    async def page(self, scope, user_code, search_key=None, offset=0, limit=10):
        records = [
            p for p in self.projects
            if scope.permits(p.project_code, p.manager_user_code, p.director_user_code, user_code)
            and (not search_key or search_key in p.project_code or search_key in p.project_name)
        ]
        return records[offset:offset + limit], len(records)

    async def list_participated(self, user_code):
        member_codes = {m.project_code for m in self.members if m.user_code == user_code}
        return [p for p in self.projects if p.project_code in member_codes or p.manager_user_code == user_code]

    async def create(self, data, session=None):
        project = Project(id=uuid.uuid4(), **data)
        self.projects.append(project)
        return project

    async def update(self, project_id, data, session=None):
        project = await self.get_by_id(project_id)
        if project is None:
            return None
        for key, value in data.items():
            setattr(project, key, value)
        return project

    async def delete(self, project_id, session=None):
        project = await self.get_by_id(project_id)
        if project is None:
            return None
        self.members = [m for m in self.members if m.project_code != project.project_code]
        self.projects.remove(project)
        return project

    async def list_members(self, project_code):
        members = [m for m in self.members if m.project_code == project_code]
        return sorted(members, key=lambda m: m.join_date or date.min)

    async def get_member(self, project_code, user_code):
        return next((m for m in self.members if m.project_code == project_code and m.user_code == user_code), None)

    async def count_members(self, project_codes):
        counts = {}
        for member in self.members:
            if member.project_code in project_codes:
                counts[member.project_code] = counts.get(member.project_code, 0) + 1
        return counts

    async def add_member(self, data, session=None):
        member = ProjectMember(id=uuid.uuid4(), **data)
        self.members.append(member)
        return member

    async def delete_member(self, member_id, session=None):
        before = len(self.members)
        self.members = [m for m in self.members if m.id != member_id]
        return len(self.members) < before


class FakeRedisService:
    def __init__(self):
        self.store: Dict[str, str] = {}

    async def cache_refresh_token(self, user_code, token, expire):
        self.store[user_code] = token
        return True

    async def get_refresh_token(self, user_code):
        return self.store.get(user_code)

    async def delete_refresh_token(self, user_code):
        return self.store.pop(user_code, None) is not None


class FakeWebSocket:
    def __init__(self, fail: bool = False):
        self.accepted = False
        self.fail = fail
        self.sent: List[Dict] = []

    async def accept(self):
        self.accepted = True

    async def send_json(self, data):
        if self.fail:
            raise RuntimeError("connection reset")
        self.sent.append(data)


# ====================== 样例数据 ======================
ALL_PERMISSION_CODES = [
    "system", "system:user", "system:permission", "system:role", "system:log",
    "project", "project:project",
    "button:user:create", "button:user:edit", "button:role:create", "button:project:create",
]


@pytest.fixture
def permission_nodes():
    """
    system(0)
    ├── system:user(0)
    │   ├── button:user:create
    │   └── button:user:edit
    ├── system:permission(1)
    ├── system:role(2)
    │   └── button:role:create
    └── system:log(3, 已停用)
    project(1)
    └── project:project(0)
        └── button:project:create
    """
    return [
        make_permission("system", sort=0),
        make_permission("system:user", "system", sort=0),
        make_permission("system:permission", "system", sort=1),
        make_permission("system:role", "system", sort=2),
        make_permission("project", sort=1),
        make_permission("project:project", "project", sort=0),
        make_permission("button:user:create", "system:user", PERMISSION_TYPE_BUTTON, sort=0),
        make_permission("button:user:edit", "system:user", PERMISSION_TYPE_BUTTON, sort=1),
        make_permission("button:role:create", "system:role", PERMISSION_TYPE_BUTTON, sort=0),
        make_permission("button:project:create", "project:project", PERMISSION_TYPE_BUTTON, sort=0),
        make_permission("system:log", "system", sort=3, status=0),
    ]


@pytest.fixture
def permission_repository(permission_nodes):
    return FakePermissionRepository(permission_nodes)


@pytest.fixture
def role_repository():
    roles = [
        make_role("admin", ["ALL"]),
        make_role("pm", "P001,P002"),
        make_role("auditor", ["P002", "P003"]),
        make_role("staff", None),
    ]
    grants = {
        # 通配符覆盖样例数据中没有的按钮
        "admin": ALL_PERMISSION_CODES + ["button:*:*"],
        "pm": ["project", "project:project", "button:project:create"],
        "auditor": ["system:user", "button:user:create", "project:project"],
        "staff": ["project:project"],
    }
    return FakeRoleRepository(roles, grants)


@pytest.fixture
def user_repository():
    return FakeUserRepository([
        make_user("admin", "admin", user_name="管理员"),
        make_user("zhangsan", "pm,auditor", user_name="张三"),
        make_user("lisi", ["staff"], user_name="李四"),
        make_user("wangwu", "staff", status=0, user_name="王五"),
        make_user("zhaoliu", "ghost", user_name="赵六"),
    ])


@pytest.fixture
def project_repository():
    return FakeProjectRepository([
        make_project("P001", "zhangsan"),
        make_project("P002", "lisi", "zhangsan"),
        make_project("P003", "wangwu"),
        make_project("P004", "admin", "lisi"),
    ], [
        make_member("P001", "lisi", "开发", date(2025, 1, 2)),
        make_member("P001", "wangwu", "测试", date(2025, 1, 1)),
    ])


@pytest.fixture
def redis_service():
    return FakeRedisService()


# ====================== Service ======================
@pytest.fixture
def permission_service(permission_repository):
    return PermissionService(permission_repository=permission_repository)


@pytest.fixture
def user_service(user_repository, role_repository):
    return UserService(user_repository=user_repository, role_repository=role_repository)


@pytest.fixture
def role_service(role_repository, permission_repository, user_repository):
    return RoleService(
        role_repository=role_repository,
        permission_repository=permission_repository,
        user_repository=user_repository
    )


@pytest.fixture
def data_scope_service(user_repository, role_repository):
    return DataScopeService(user_repository=user_repository, role_repository=role_repository)


@pytest.fixture
def project_service(project_repository, user_repository, data_scope_service):
    return ProjectService(
        project_repository=project_repository,
        user_repository=user_repository,
        data_scope_service=data_scope_service
    )


@pytest.fixture
def auth_service(user_repository, user_service, permission_service, redis_service):
    return AuthService(
        user_repository=user_repository,
        user_service=user_service,
        permission_service=permission_service,
        redis_service=redis_service
    )


@pytest.fixture
def websocket_factory():
    return FakeWebSocket
