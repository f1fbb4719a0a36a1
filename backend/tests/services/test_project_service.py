"""
项目Service测试：数据范围过滤、增删改、成员管理
backend/tests/services/test_project_service.py
"""
import uuid

import pytest

from app.core.exceptions import BadRequest, ErrorCode, ResourceNotFound
from app.schemas.project import ProjectCreate, ProjectMemberCreate, ProjectUpdate


def project_codes(page):
    return sorted(project.project_code for project in page.records)


class TestListProjects:

    @pytest.mark.asyncio
    async def test_all_scope_sees_everything(self, project_service):
        page = await project_service.list_projects("admin")

        assert page.total == 4

    @pytest.mark.asyncio
    async def test_codes_scope(self, project_service):
        page = await project_service.list_projects("zhangsan")

        assert project_codes(page) == ["P001", "P002", "P003"]

    @pytest.mark.asyncio
    async def test_owned_scope_manager_or_director(self, project_service):
        page = await project_service.list_projects("lisi")

        # lisi是P002的经理、P004的总监
        assert project_codes(page) == ["P002", "P004"]

    @pytest.mark.asyncio
    async def test_scope_and_search_combined(self, project_service):
        page = await project_service.list_projects("zhangsan", search_key="P003")

        assert project_codes(page) == ["P003"]

    @pytest.mark.asyncio
    async def test_no_user_returns_empty_page(self, project_service):
        page = await project_service.list_projects(None, current=2, size=5)

        assert page.total == 0
        assert page.records == []
        assert page.current == 2

    @pytest.mark.asyncio
    async def test_user_names_filled(self, project_service):
        page = await project_service.list_projects("lisi")

        p002 = next(project for project in page.records if project.project_code == "P002")
        assert p002.manager_user_name == "李四"
        assert p002.director_user_name == "张三"

    @pytest.mark.asyncio
    async def test_paging(self, project_service):
        page = await project_service.list_projects("admin", current=2, size=3)

        assert page.total == 4
        assert len(page.records) == 1
        assert page.pages == 2


@pytest.mark.asyncio
async def test_get_data_scope(project_service):
    scope = await project_service.get_data_scope("zhangsan")

    assert scope.kind == "codes"
    assert sorted(scope.project_codes) == ["P001", "P002", "P003"]
    assert (await project_service.get_data_scope("lisi")).kind == "owned"


class TestCreateProject:

    @pytest.mark.asyncio
    async def test_create(self, project_service):
        project_in = ProjectCreate(project_code="P100", project_name="新项目", manager_user_code="lisi")

        project = await project_service.create_project(project_in, operator="admin")

        assert project.project_code == "P100"
        assert project.manager_user_name == "李四"
        assert project.director_user_name is None

    @pytest.mark.asyncio
    async def test_duplicate_code(self, project_service):
        project_in = ProjectCreate(project_code="P001", project_name="重复", manager_user_code="lisi")

        with pytest.raises(BadRequest) as exc_info:
            await project_service.create_project(project_in)
        assert exc_info.value.error_code == ErrorCode.PROJECT_CODE_EXISTS

    @pytest.mark.asyncio
    async def test_manager_not_found(self, project_service):
        project_in = ProjectCreate(project_code="P101", project_name="无经理", manager_user_code="ghost")

        with pytest.raises(ResourceNotFound) as exc_info:
            await project_service.create_project(project_in)
        assert exc_info.value.error_code == ErrorCode.MANAGER_NOT_FOUND




class TestGetProject:

    @pytest.mark.asyncio
    async def test_missing(self, project_service):
        with pytest.raises(ResourceNotFound):
            await project_service.get_project(uuid.uuid4())

    @pytest.mark.asyncio
    async def test_visible_in_scope(self, project_service, project_repository):
        p004 = await project_repository.get_by_code("P004")

        project = await project_service.get_project(p004.id, user_code="lisi")

        assert project.project_code == "P004"
        assert project.director_user_name == "李四"

    @pytest.mark.asyncio
    async def test_out_of_scope_is_not_found(self, project_service, project_repository):
        p004 = await project_repository.get_by_code("P004")

        # zhangsan的范围是P001~P003
        with pytest.raises(ResourceNotFound) as exc_info:
            await project_service.get_project(p004.id, user_code="zhangsan")
        assert exc_info.value.error_code == ErrorCode.PROJECT_NOT_FOUND

    @pytest.mark.asyncio
    async def test_member_count(self, project_service, project_repository):
        p001 = await project_repository.get_by_code("P001")

        assert (await project_service.get_project(p001.id)).member_count == 2


class TestUpdateDeleteProject:

    @pytest.mark.asyncio
    async def test_update(self, project_service, project_repository):
        p003 = await project_repository.get_by_code("P003")

        project = await project_service.update_project(
            p003.id, ProjectUpdate(project_name="改名", manager_user_code="lisi"), operator="admin"
        )

        assert project.project_name == "改名"
        assert project.manager_user_name == "李四"
        assert p003.update_by == "admin"
        # lisi成为经理后，owned范围可见
        page = await project_service.list_projects("lisi")
        assert project_codes(page) == ["P002", "P003", "P004"]

    @pytest.mark.asyncio
    async def test_update_unknown_manager(self, project_service, project_repository):
        p003 = await project_repository.get_by_code("P003")

        with pytest.raises(ResourceNotFound) as exc_info:
            await project_service.update_project(p003.id, ProjectUpdate(manager_user_code="ghost"))
        assert exc_info.value.error_code == ErrorCode.MANAGER_NOT_FOUND
        assert p003.manager_user_code == "wangwu"

    @pytest.mark.asyncio
    async def test_update_missing(self, project_service):
        with pytest.raises(ResourceNotFound):
            await project_service.update_project(uuid.uuid4(), ProjectUpdate(status=2))

    @pytest.mark.asyncio
    async def test_delete_cascades_members(self, project_service, project_repository):
        p001 = await project_repository.get_by_code("P001")

        await project_service.delete_project(p001.id)

        assert await project_repository.get_by_code("P001") is None
        assert await project_repository.list_members("P001") == []
        with pytest.raises(ResourceNotFound):
            await project_service.delete_project(p001.id)


class TestProjectMembers:

    @pytest.mark.asyncio
    async def test_list_ordered_by_join_date(self, project_service):
        members = await project_service.list_members("P001", user_code="admin")

        assert [m.user_code for m in members] == ["wangwu", "lisi"]
        assert members[1].user_name == "李四"
        assert members[1].role == "开发"

    @pytest.mark.asyncio
    async def test_list_out_of_scope(self, project_service):
        # lisi只能看到P002、P004
        with pytest.raises(ResourceNotFound):
            await project_service.list_members("P001", user_code="lisi")

    @pytest.mark.asyncio
    async def test_add_and_remove(self, project_service):
        member = await project_service.add_member(
            ProjectMemberCreate(project_code="P002", user_code="zhangsan", role="开发"), operator="lisi"
        )

        assert member.user_name == "张三"
        assert [m.user_code for m in await project_service.list_members("P002")] == ["zhangsan"]

        await project_service.remove_member(member.id)
        assert await project_service.list_members("P002") == []
        with pytest.raises(ResourceNotFound) as exc_info:
            await project_service.remove_member(member.id)
        assert exc_info.value.error_code == ErrorCode.MEMBER_NOT_FOUND

    @pytest.mark.asyncio
    async def test_add_duplicate(self, project_service):
        with pytest.raises(BadRequest) as exc_info:
            await project_service.add_member(ProjectMemberCreate(project_code="P001", user_code="lisi"))
        assert exc_info.value.error_code == ErrorCode.MEMBER_EXISTS

    @pytest.mark.asyncio
    async def test_add_unknown_project_or_user(self, project_service):
        with pytest.raises(ResourceNotFound) as exc_info:
            await project_service.add_member(ProjectMemberCreate(project_code="P999", user_code="lisi"))
        assert exc_info.value.error_code == ErrorCode.PROJECT_NOT_FOUND

        with pytest.raises(ResourceNotFound) as exc_info:
            await project_service.add_member(ProjectMemberCreate(project_code="P001", user_code="ghost"))
        assert exc_info.value.error_code == ErrorCode.USER_NOT_FOUND


class TestMyProjects:

    @pytest.mark.asyncio
    async def test_member_or_manager(self, project_service):
        projects = await project_service.get_my_projects("lisi")

        # P001为成员、P002为经理；P004仅为总监，不算参与
        assert sorted(p.project_code for p in projects) == ["P001", "P002"]

    @pytest.mark.asyncio
    async def test_no_user(self, project_service):
        assert await project_service.get_my_projects(None) == []
