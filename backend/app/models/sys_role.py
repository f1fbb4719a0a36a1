"""
系统角色模型
backend/app/models/sys_role.py
角色与权限按名称/编码关联（sys_role_permission），不走主键外键
"""
from sqlalchemy import Column, String, DateTime, Table, text
from sqlalchemy.orm import validates

from app.models.base import Base, uuid_pk_column, CommaSeparatedList, split_comma_list

# 数据范围：全部项目
DATA_SCOPE_ALL = "ALL"


class SysRole(Base):
    __tablename__ = 'sys_role'
    __table_args__ = {'comment': '系统角色表'}

    # 使用UUID主键
    id = uuid_pk_column()
    name = Column(String(64), nullable=False, unique=True, index=True, comment='角色名称')
    description = Column(String(255), nullable=True, comment='角色描述')
    # 库中为逗号分隔字符串（项目编码列表或ALL），模型层为List[str]
    data_scope = Column(CommaSeparatedList(1024), nullable=True, comment='数据范围(项目编码逗号分隔，ALL-全部项目)')

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

    @validates('data_scope')
    def _normalize_data_scope(self, key, value):
        if isinstance(value, str):
            return split_comma_list(value)
        return list(value) if value else []

    def __repr__(self):
        return f"<SysRole(id={self.id}, name={self.name}, data_scope={self.data_scope})>"


# 角色权限关联表（按角色名称 + 权限编码关联）
sys_role_permission = Table(
    'sys_role_permission',
    Base.metadata,
    Column('role_name', String(64), primary_key=True, comment='角色名称'),
    Column('permission_code', String(128), primary_key=True, comment='权限编码'),
    comment='角色权限关联表'
)
