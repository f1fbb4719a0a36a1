"""
项目模型
backend/app/models/project.py
"""
from sqlalchemy import Column, String, SmallInteger, Date, DateTime, UniqueConstraint, text

from app.models.base import Base, uuid_pk_column

# 项目状态(1-进行中 2-已完成 3-已取消)
PROJECT_STATUS_ACTIVE = 1
PROJECT_STATUS_DONE = 2
PROJECT_STATUS_CANCELLED = 3


class Project(Base):
    __tablename__ = 'project'
    __table_args__ = {'comment': '项目表'}

    id = uuid_pk_column()
    project_code = Column(String(64), nullable=False, unique=True, index=True, comment='项目编码')
    project_name = Column(String(128), nullable=False, comment='项目名称')
    description = Column(String(512), nullable=True, comment='项目描述')
    manager_user_code = Column(String(64), nullable=False, index=True, comment='项目经理用户编码')
    director_user_code = Column(String(64), nullable=True, index=True, comment='项目总监用户编码')
    start_date = Column(Date, nullable=True, comment='开始日期')
    end_date = Column(Date, nullable=True, comment='结束日期')
    status = Column(SmallInteger, default=PROJECT_STATUS_ACTIVE, nullable=False, comment='项目状态(1-进行中 2-已完成 3-已取消)')

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
        return f"<Project(id={self.id}, project_code={self.project_code}, project_name={self.project_name})>"


class ProjectMember(Base):
    """项目成员：按项目编码/用户编码关联，同一项目内用户唯一"""
    __tablename__ = 'project_member'
    __table_args__ = (
        UniqueConstraint('project_code', 'user_code', name='uq_project_member_project_user'),
        {'comment': '项目成员表'},
    )

    id = uuid_pk_column()
    project_code = Column(String(64), nullable=False, index=True, comment='项目编码')
    user_code = Column(String(64), nullable=False, index=True, comment='成员用户编码')
    role = Column(String(64), nullable=True, comment='成员角色（开发、测试、设计等）')
    join_date = Column(Date, nullable=True, comment='加入日期')

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
        return f"<ProjectMember(project_code={self.project_code}, user_code={self.user_code})>"
