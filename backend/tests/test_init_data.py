"""
初始化数据脚本测试（只校验种子数据结构，不连数据库）
backend/tests/test_init_data.py
"""
from app.enums.sys_permissions import PermissionCode
from app.models.sys_permission import PERMISSION_TYPE_MENU
from app.scripts.init_data import build_seed_permissions
from app.utils.permission_tree import build_tree


def test_seed_covers_every_permission_code():
    codes = [row["code"] for row in build_seed_permissions()]

    assert sorted(codes) == sorted(perm.value for perm in PermissionCode.get_all())
    assert len(codes) == len(set(codes))


def test_buttons_hang_under_menus():
    rows = build_seed_permissions()
    menus = {row["code"] for row in rows if row["type"] == PERMISSION_TYPE_MENU}

    for row in rows:
        if row["type"] != PERMISSION_TYPE_MENU:
            assert row["parent_code"] in menus


def test_seed_menu_tree_shape():
    class Row:
        def __init__(self, data):
            self.__dict__.update(data)
            self.id = "00000000-0000-0000-0000-000000000000"

    menus = [Row(row) for row in build_seed_permissions() if row["type"] == PERMISSION_TYPE_MENU]
    menus.sort(key=lambda row: row.sort)
    tree = build_tree(menus)

    assert [node.code for node in tree] == ["system", "project"]
    assert [node.code for node in tree[0].children] == ["system:user", "system:permission", "system:role"]
    assert [node.code for node in tree[1].children] == ["project:project"]
