"""
权限Service测试
backend/tests/services/test_permission_service.py
"""
import uuid

import pytest

from app.core.exceptions import BadRequest, ErrorCode, ResourceNotFound
from app.schemas.sys_permission import PermissionCreate, PermissionUpdate


def codes_of(tree):
    return [node.code for node in tree]


def flatten(tree):
    for node in tree:
        yield node
        yield from flatten(node.children or [])


class TestUserPermissionTree:
    """用户菜单树"""

    @pytest.mark.asyncio
    async def test_child_grant_includes_ancestor(self, permission_service):
        tree = await permission_service.get_user_permission_tree(["system:user"])

        assert codes_of(tree) == ["system"]
        assert codes_of(tree[0].children) == ["system:user"]
        assert tree[0].children[0].children is None

    @pytest.mark.asyncio
    async def test_every_non_root_has_parent_in_tree(self, permission_service):
        tree = await permission_service.get_user_permission_tree(["system:role", "project:project"])

        present = {node.code for node in flatten(tree)}
        for node in flatten(tree):
            if node.parent_code:
                assert node.parent_code in present

    @pytest.mark.asyncio
    async def test_empty_codes(self, permission_service):
        assert await permission_service.get_user_permission_tree([]) == []

    @pytest.mark.asyncio
    async def test_idempotent(self, permission_service):
        codes = ["system:user", "system:role", "project:project"]

        first = await permission_service.get_user_permission_tree(codes)
        second = await permission_service.get_user_permission_tree(codes)

        assert [n.model_dump() for n in first] == [n.model_dump() for n in second]

    @pytest.mark.asyncio
    async def test_sort_order(self, permission_service):
        tree = await permission_service.get_user_permission_tree(
            ["project:project", "system:role", "system:user", "system:permission"]
        )

        assert codes_of(tree) == ["system", "project"]
        assert codes_of(tree[0].children) == ["system:user", "system:permission", "system:role"]

    @pytest.mark.asyncio
    async def test_disabled_button_and_unknown_codes_ignored(self, permission_service):
        tree = await permission_service.get_user_permission_tree(
            ["system:log", "button:user:create", "no:such:code"]
        )

        assert tree == []

    @pytest.mark.asyncio
    async def test_buttons_never_in_menu_tree(self, permission_service):
        tree = await permission_service.get_user_permission_tree(["system:user", "button:user:create"])

        assert "button:user:create" not in {node.code for node in flatten(tree)}


class TestUserButtonPermissions:

    @pytest.mark.asyncio
    async def test_only_granted_buttons(self, permission_service):
        buttons = await permission_service.get_user_button_permissions(
            ["system", "system:user", "button:user:create", "button:project:create"]
        )

        assert set(buttons) == {"button:user:create", "button:project:create"}

    @pytest.mark.asyncio
    async def test_menu_codes_excluded(self, permission_service):
        buttons = await permission_service.get_user_button_permissions(["system", "project", "project:project"])

        assert buttons == []

    @pytest.mark.asyncio
    async def test_empty_codes(self, permission_service):
        assert await permission_service.get_user_button_permissions([]) == []


class TestPermissionTree:
    """管理端权限树"""

    @pytest.mark.asyncio
    async def test_full_tree_includes_buttons_and_disabled(self, permission_service):
        tree = await permission_service.get_permission_tree()

        codes = {node.code for node in flatten(tree)}
        assert "button:role:create" in codes
        assert "system:log" in codes
        assert codes_of(tree[0].children) == ["system:user", "system:permission", "system:role", "system:log"]

    @pytest.mark.asyncio
    async def test_sub_tree(self, permission_service):
        tree = await permission_service.get_permission_sub_tree("system:user")

        assert codes_of(tree) == ["button:user:create", "button:user:edit"]

    @pytest.mark.asyncio
    async def test_sub_tree_of_unknown_code(self, permission_service):
        assert await permission_service.get_permission_sub_tree("missing") == []


class TestPermissionCrud:

    @pytest.mark.asyncio
    async def test_create(self, permission_service, permission_repository):
        perm_in = PermissionCreate(name="日志", code="system:audit", parent_code="system", sort=9)

        perm = await permission_service.create_permission(perm_in, operator="admin")

        assert perm.code == "system:audit"
        assert perm.create_by == "admin"
        assert await permission_repository.get_by_code("system:audit") is perm

    @pytest.mark.asyncio
    async def test_create_duplicate_code(self, permission_service):
        with pytest.raises(BadRequest) as exc_info:
            await permission_service.create_permission(PermissionCreate(name="x", code="system"))

        assert exc_info.value.error_code == ErrorCode.PERMISSION_CODE_EXISTS

    @pytest.mark.asyncio
    async def test_get_missing(self, permission_service):
        with pytest.raises(ResourceNotFound):
            await permission_service.get_permission_by_id(uuid.uuid4())

    @pytest.mark.asyncio
    async def test_update_and_disable(self, permission_service, permission_repository):
        perm = await permission_repository.get_by_code("system:role")

        await permission_service.update_permission(perm.id, PermissionUpdate(status=0), operator="admin")

        tree = await permission_service.get_user_permission_tree(["system:role"])
        assert tree == []
        assert perm.update_by == "admin"

    @pytest.mark.asyncio
    async def test_update_keeps_code(self, permission_service, permission_repository):
        perm = await permission_repository.get_by_code("system:role")

        perm_update = PermissionUpdate.model_validate({"code": "system:renamed", "name": "角色"})
        await permission_service.update_permission(perm.id, perm_update)

        assert perm.code == "system:role"
        assert perm.name == "角色"

    @pytest.mark.asyncio
    async def test_delete(self, permission_service, permission_repository):
        perm = await permission_repository.get_by_code("system:role")

        await permission_service.delete_permission(perm.id)

        assert await permission_repository.get_by_code("system:role") is None
        with pytest.raises(ResourceNotFound):
            await permission_service.delete_permission(perm.id)

    @pytest.mark.asyncio
    async def test_list_page(self, permission_service):
        page = await permission_service.list_permissions(current=1, size=5, search_key="system")

        assert page.total == 5
        assert len(page.records) == 5
        assert page.pages == 1
