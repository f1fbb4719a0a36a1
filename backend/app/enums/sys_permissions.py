"""
权限枚举文件
backend/app/enums/sys_permissions.py
菜单权限：模块[:页面]，按钮权限：button:资源:操作
"""
from enum import Enum


class PermissionCode(Enum):
    """
    系统权限枚举类
    每个枚举值格式: (权限代码, 显示名称, 描述)
    """

    def __new__(cls, code: str, name: str, description: str):
        obj = object.__new__(cls)
        obj._value_ = code
        obj.display_name = name
        obj.description = description
        return obj

    # 菜单权限
    SYSTEM = ("system", "系统管理", "系统管理目录")
    SYSTEM_USER = ("system:user", "用户管理", "查看用户列表与详情")
    SYSTEM_PERMISSION = ("system:permission", "权限管理", "查看权限列表与权限树")
    SYSTEM_ROLE = ("system:role", "角色管理", "查看角色列表与角色权限")
    PROJECT = ("project", "项目管理", "项目管理目录")
    PROJECT_PROJECT = ("project:project", "项目列表", "按数据范围查看项目")

    # 用户按钮权限
    USER_CREATE = ("button:user:create", "新增用户", "允许创建用户")
    USER_EDIT = ("button:user:edit", "编辑用户", "允许修改用户信息及角色")
    USER_DELETE = ("button:user:delete", "删除用户", "允许删除用户")
    USER_RESET_PASSWORD = ("button:user:reset-password", "重置密码", "允许管理员重置用户密码")

    # 角色按钮权限
    ROLE_CREATE = ("button:role:create", "新增角色", "允许创建角色并分配权限")
    ROLE_EDIT = ("button:role:edit", "编辑角色", "允许修改角色、数据范围及权限")
    ROLE_DELETE = ("button:role:delete", "删除角色", "允许删除角色")

    # 权限按钮权限
    PERMISSION_CREATE = ("button:permission:create", "新增权限", "允许新增菜单/按钮权限")
    PERMISSION_EDIT = ("button:permission:edit", "编辑权限", "允许修改权限节点")
    PERMISSION_DELETE = ("button:permission:delete", "删除权限", "允许删除权限节点")

    # 项目按钮权限
    PROJECT_CREATE = ("button:project:create", "新增项目", "允许创建项目")
    PROJECT_EDIT = ("button:project:edit", "编辑项目", "允许修改项目信息")
    PROJECT_DELETE = ("button:project:delete", "删除项目", "允许删除项目及其成员")
    PROJECT_MEMBER = ("button:project:member", "成员管理", "允许添加/移除项目成员")

    @property
    def is_button(self) -> bool:
        return self.value.startswith("button:")

    @classmethod
    def get_all(cls):
        """获取所有权限枚举实例"""
        return list(cls)

