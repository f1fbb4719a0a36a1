"""
数据范围合并测试
backend/tests/test_data_scope.py
"""
from app.utils.data_scope import ProjectScope, ScopeKind, merge_data_scopes


def test_all_wins_over_codes():
    scope = merge_data_scopes([["P1"], ["ALL"]])

    assert scope.kind == ScopeKind.ALL
    assert scope.project_codes == ()


def test_all_mixed_with_codes_in_same_role():
    assert merge_data_scopes([["P1", "ALL"]]).kind == ScopeKind.ALL


def test_codes_are_unioned_and_deduplicated():
    scope = merge_data_scopes([["P1", "P2"], ["P2", "P3"]])

    assert scope.kind == ScopeKind.CODES
    assert scope.project_codes == ("P1", "P2", "P3")


def test_unconfigured_roles_fall_back_to_owned():
    assert merge_data_scopes([None, []]).kind == ScopeKind.OWNED


def test_no_roles_is_owned():
    assert merge_data_scopes([]) == ProjectScope.owned()


def test_unconfigured_role_does_not_hide_configured_one():
    scope = merge_data_scopes([None, ["P9"]])

    assert scope == ProjectScope.codes(["P9"])


def test_permits_single_project():
    assert ProjectScope.all().permits("P1", "a", None, "zz")
    assert ProjectScope.codes(["P1"]).permits("P1", "a", None, "zz")
    assert not ProjectScope.codes(["P1"]).permits("P2", "zz", None, "zz")
    assert ProjectScope.owned().permits("P2", "a", "zz", "zz")
    assert not ProjectScope.owned().permits("P2", "a", None, "zz")
