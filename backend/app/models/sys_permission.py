"""
系统权限模型
backend/app/models/sys_permission.py
权限节点：菜单（type=menu）与按钮（其他type），通过parent_code挂接成树
"""
from sqlalchemy import Column, String, SmallInteger, Integer, DateTime, text

from app.models.base import Base, uuid_pk_column

PERMISSION_TYPE_MENU = "menu"
PERMISSION_TYPE_BUTTON = "button"

PERMISSION_STATUS_ENABLED = 1
PERMISSION_STATUS_DISABLED = 0


class SysPermission(Base):
    __tablename__ = "sys_permission"
    __table_args__ = {'comment': '系统权限表'}

    # 使用UUID主键
    id = uuid_pk_column()
    name = Column(String(64), nullable=False, comment='权限名称')
    menu_name = Column(String(64), nullable=True, comment='菜单显示名称')
    code = Column(String(128), nullable=False, unique=True, index=True, comment='权限编码')
    module = Column(String(64), nullable=False, default='', comment='所属模块')
    parent_code = Column(String(128), nullable=True, index=True, comment='父级权限编码（空表示根节点）')
    type = Column(String(16), nullable=True, comment='权限类型(menu-菜单 button-按钮)')
    path = Column(String(255), nullable=True, comment='路由地址')
    icon = Column(String(64), nullable=True, comment='菜单图标')
    component = Column(String(255), nullable=True, comment='前端组件路径')
    sort = Column(Integer, default=0, nullable=False, comment='显示顺序')
    description = Column(String(255), nullable=False, default='', comment='权限描述')
    status = Column(SmallInteger, default=PERMISSION_STATUS_ENABLED, nullable=False, comment='权限状态(1-正常 0-停用)')

    # 审计字段
    create_by = Column(String(64), nullable=True, comment='创建人编码')
    create_time = Column(DateTime, server_default=text('CURRENT_TIMESTAMP'), comment='创建时间')
    update_by = Column(String(64), nullable=True, comment='更新人编码')
    update_time = Column(
        DateTime,
        server_default=text('CURRENT_TIMESTAMP'),
        onupdate=text('CURRENT_TIMESTAMP'),
        comment='更新时间'
    )

    def __repr__(self):
        return f"<SysPermission(id={self.id}, name={self.name}, code={self.code})>"
