"""
项目相关的Pydantic Schemas
backend/app/schemas/project.py
"""
from datetime import date
from typing import Optional, List

from pydantic import Field

from app.schemas.base import BaseSchema, TimestampSchema, IDSchema


class ProjectBase(BaseSchema):
    project_code: str = Field(..., description="项目编码", examples=["P2025001"])
    project_name: str = Field(..., description="项目名称")
    description: Optional[str] = Field(None, description="项目描述")
    manager_user_code: str = Field(..., description="项目经理用户编码")
    director_user_code: Optional[str] = Field(None, description="项目总监用户编码")
    start_date: Optional[date] = Field(None, description="开始日期")
    end_date: Optional[date] = Field(None, description="结束日期")
    status: int = Field(1, description="项目状态(1-进行中 2-已完成 3-已取消)")


class ProjectCreate(ProjectBase):
    pass


class ProjectUpdate(BaseSchema):
    """项目编码创建后不可修改（数据范围与成员均按编码关联）"""
    project_name: Optional[str] = None
    description: Optional[str] = None
    manager_user_code: Optional[str] = None
    director_user_code: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[int] = None


class ProjectOut(ProjectBase, TimestampSchema, IDSchema):
    manager_user_name: Optional[str] = Field(None, description="项目经理姓名")
    director_user_name: Optional[str] = Field(None, description="项目总监姓名")
    member_count: int = Field(0, description="成员数量")


class ProjectScopeOut(BaseSchema):
    """当前用户的项目数据范围"""
    kind: str = Field(..., description="all-全部项目 codes-指定项目 owned-本人负责的项目")
    project_codes: List[str] = Field(default_factory=list)


class ProjectMemberCreate(BaseSchema):
    project_code: str = Field(..., description="项目编码")
    user_code: str = Field(..., description="成员用户编码")
    role: Optional[str] = Field(None, description="成员角色（开发、测试、设计等）")
    join_date: Optional[date] = Field(None, description="加入日期")


class ProjectMemberOut(ProjectMemberCreate, TimestampSchema, IDSchema):
    user_name: Optional[str] = Field(None, description="成员姓名")
    email: Optional[str] = Field(None, description="成员邮箱")
