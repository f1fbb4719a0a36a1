"""
系统用户模型
backend/app/models/sys_user.py
用户可同时拥有多个角色，role_name在模型层为List[str]
"""
from sqlalchemy import Column, String, SmallInteger, DateTime, text
from sqlalchemy.orm import validates

from app.models.base import Base, uuid_pk_column, CommaSeparatedList, split_comma_list

USER_STATUS_ENABLED = 1
USER_STATUS_DISABLED = 0


class SysUser(Base):
    __tablename__ = 'sys_user'
    __table_args__ = {'comment': '系统用户表'}

    # 使用UUID主键
    id = uuid_pk_column()
    user_code = Column(String(64), nullable=False, unique=True, index=True, comment='用户编码（工号）')
    user_name = Column(String(64), nullable=False, comment='用户姓名')
    password = Column(String(100), nullable=False, comment='密码')
    email = Column(String(128), nullable=True, comment='用户邮箱')
    phone_number = Column(String(20), nullable=True, comment='联系方式')
    # 多角色/多部门：库中逗号分隔
    role_name = Column(CommaSeparatedList(512), nullable=True, comment='角色名称（逗号分隔）')
    department_name = Column(CommaSeparatedList(512), nullable=True, comment='部门名称（逗号分隔）')
    timezone = Column(String(64), nullable=True, comment='用户时区')
    status = Column(SmallInteger, default=USER_STATUS_ENABLED, nullable=False, comment='状态(1-正常 0-禁用)')

    # 时间戳和审计字段
    create_by = Column(String(64), nullable=True, comment='创建人编码')
    create_time = Column(DateTime, server_default=text('CURRENT_TIMESTAMP'), comment='创建时间')
    update_by = Column(String(64), nullable=True, comment='修改人编码')
    update_time = Column(
        DateTime,
        server_default=text('CURRENT_TIMESTAMP'),
        onupdate=text('CURRENT_TIMESTAMP'),
        comment='更新时间'
    )

    @validates('role_name', 'department_name')
    def _normalize_list(self, key, value):
        if isinstance(value, str):
            return split_comma_list(value)
        return [item.strip() for item in value if item and item.strip()] if value else []

    @property
    def is_active(self) -> bool:
        return self.status == USER_STATUS_ENABLED

    def __repr__(self):
        return f"<SysUser(id={self.id}, user_code={self.user_code}, user_name={self.user_name})>"
