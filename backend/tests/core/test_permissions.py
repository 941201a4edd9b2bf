"""Role Permissions — matrix, representative scope and list filters.

Tests:
    - Students read content only; representatives write inside assignments
    - Admin/superadmin hold everything; unknown roles nothing
    - resource_filter/matches_filter: None = unrestricted, [] = nothing
    - role_satisfies and audit_role normalization
    - Permissions.to_dict renders a flag for every entity
"""

from uuid import uuid4

import pytest

from pecup.core.domain_types import AdminRole, PermissionAction, PermissionEntity
from pecup.core.errors import ForbiddenError
from pecup.core.permissions import (
    RepresentativeAssignment, ResourceFilter, UserContext, audit_role,
    can_promote_semester, check_permission, has_scope, matches_filter,
    permissions_for, resource_filter, role_satisfies,
)

BRANCH, YEAR, SEMESTER = uuid4(), uuid4(), uuid4()


def _ctx(role: str, reps=None, **extra) -> UserContext:
    return UserContext(
        id=uuid4(), email=f"{role}@pec.edu", name=role, role=role,
        representatives=reps or [], **extra,
    )


def _rep(active=True) -> UserContext:
    return _ctx("representative", [RepresentativeAssignment(BRANCH, YEAR, active)])


def test_student_reads_but_never_writes():
    perms = permissions_for(_ctx("student"))
    assert perms.allows(PermissionAction.READ, PermissionEntity.RESOURCES)
    assert not perms.allows(PermissionAction.WRITE, PermissionEntity.RESOURCES)
    assert not perms.allows(PermissionAction.READ, PermissionEntity.PROFILES)


def test_admin_has_everything_and_unknown_nothing():
    admin = permissions_for(_ctx("superadmin"))
    assert all(
        admin.allows(action, entity)
        for action in PermissionAction for entity in PermissionEntity
    )
    assert not permissions_for(_ctx("guest")).allows(
        PermissionAction.READ, PermissionEntity.RESOURCES,
    )
    assert not permissions_for(None).allows(
        PermissionAction.READ, PermissionEntity.RESOURCES,
    )


def test_representative_scope_needs_active_assignment():
    assert has_scope(_rep(), BRANCH, YEAR)
    assert not has_scope(_rep(), BRANCH, uuid4())
    assert not has_scope(_rep(active=False), BRANCH, YEAR)
    assert has_scope(_ctx("admin"), uuid4(), uuid4())
    assert not has_scope(_ctx("student"), BRANCH, YEAR)


def test_check_permission_raises_for_student_write():
    with pytest.raises(ForbiddenError):
        check_permission(_ctx("student"), PermissionAction.WRITE, PermissionEntity.EXAMS)


def test_check_permission_scopes_representatives():
    check_permission(_rep(), PermissionAction.WRITE, PermissionEntity.REMINDERS, BRANCH, YEAR)
    with pytest.raises(ForbiddenError, match="Outside assigned scope"):
        check_permission(
            _rep(), PermissionAction.WRITE, PermissionEntity.REMINDERS, uuid4(), YEAR,
        )


def test_can_promote_semester():
    assert can_promote_semester(_rep(), BRANCH, YEAR)
    assert not can_promote_semester(_ctx("student"), BRANCH, YEAR)


def test_resource_filter_by_role():
    student = _ctx("student", branch_id=BRANCH, year_id=YEAR, semester_id=SEMESTER)
    assert resource_filter(student) == ResourceFilter([BRANCH], [YEAR], [SEMESTER])
    assert resource_filter(_rep()) == ResourceFilter([BRANCH], [YEAR], None)
    assert resource_filter(_ctx("admin")) == ResourceFilter()
    assert resource_filter(_ctx("guest")) == ResourceFilter([], [], [])
    assert resource_filter(_rep(active=False)) == ResourceFilter([], [], None)


def test_matches_filter():
    rules = ResourceFilter(branch_ids=[BRANCH], year_ids=None, semester_ids=[])
    assert not matches_filter(rules, BRANCH, YEAR, SEMESTER)
    assert matches_filter(ResourceFilter(branch_ids=[BRANCH]), BRANCH, None, None)
    assert not matches_filter(ResourceFilter(branch_ids=[BRANCH]), uuid4(), None, None)


def test_role_satisfies_hierarchy():
    assert role_satisfies("superadmin", AdminRole.SUPERADMIN)
    assert role_satisfies("superadmin", AdminRole.ADMIN)
    assert role_satisfies("admin", AdminRole.ADMIN)
    assert not role_satisfies("admin", AdminRole.SUPERADMIN)
    assert not role_satisfies("representative", AdminRole.ADMIN)


def test_audit_role_logs_representatives_as_admin():
    assert audit_role("representative") == "admin"
    assert audit_role("superadmin") == "superadmin"
    assert audit_role(AdminRole.ADMIN) == "admin"


def test_permissions_to_dict_flags_every_entity():
    flags = permissions_for(_rep()).to_dict()
    assert set(flags) == {"canRead", "canWrite", "canDelete", "canPromoteSemester"}
    assert flags["canWrite"] == {
        "resources": True, "reminders": True, "recentUpdates": True,
        "exams": True, "profiles": False,
    }
    assert flags["canPromoteSemester"] is True
    assert permissions_for(None).to_dict()["canRead"]["resources"] is False
