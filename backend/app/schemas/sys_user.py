"""
用户相关的Pydantic Schemas
backend/app/schemas/sys_user.py
role_name / department_name 为列表，入参兼容逗号分隔字符串
"""
from typing import Optional, List

from pydantic import EmailStr, Field, model_validator

from app.schemas.base import BaseSchema, TimestampSchema, IDSchema, CommaList
from app.schemas.sys_permission import PermissionTreeNode


class UserBase(BaseSchema):
    user_code: str = Field(..., description="用户编码（工号）", examples=["E0001"])
    user_name: str = Field(..., description="用户姓名", examples=["张三"])
    email: Optional[EmailStr] = Field(None, description="邮箱地址")
    phone_number: Optional[str] = Field(None, description="联系方式")
    role_name: CommaList = Field(default_factory=list, description="角色名称列表")
    department_name: CommaList = Field(default_factory=list, description="部门名称列表")
    timezone: Optional[str] = Field(None, description="用户时区")
    status: int = Field(1, description="状态(1-正常 0-禁用)")


class UserCreate(UserBase):
    password: str = Field(..., description="密码", min_length=6, max_length=40)


class UserUpdate(BaseSchema):
    user_name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone_number: Optional[str] = None
    role_name: Optional[CommaList] = None
    department_name: Optional[CommaList] = None
    timezone: Optional[str] = None
    status: Optional[int] = None


class UserOut(UserBase, TimestampSchema, IDSchema):
    pass


class UserResetPassword(BaseSchema):
    """管理员重置密码"""
    new_password: str = Field(..., description="新密码", min_length=6, max_length=40)


class UserChangePassword(BaseSchema):
    """修改个人密码（需校验原密码）"""
    old_password: str = Field(..., description="原密码", min_length=6, max_length=40)
    new_password: str = Field(..., description="新密码", min_length=6, max_length=40)

    @model_validator(mode="after")
    def _check_password_changed(self):
        if self.old_password == self.new_password:
            raise ValueError("新密码不能与原密码相同")
        return self


class UserPermissions(BaseSchema):
    """用户聚合权限"""
    user_code: str
    role_names: List[str] = Field(default_factory=list)
    permission_codes: List[str] = Field(default_factory=list)


# Generic message
class Message(BaseSchema):
    message: str


# ============ 登录相关Schemas ============
class LoginRequest(BaseSchema):
    user_code: str = Field(..., description="用户编码")
    password: str = Field(..., description="密码")


class RefreshTokenRequest(BaseSchema):
    refresh_token: str = Field(..., description="刷新令牌")


class Token(BaseSchema):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="访问令牌有效期（秒）")


class LoginResult(Token):
    user: UserOut
    permissions: List[PermissionTreeNode] = Field(default_factory=list, description="用户菜单权限树")
    button_permissions: List[str] = Field(default_factory=list, description="按钮权限编码")
