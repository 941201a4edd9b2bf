"""Role Permissions — pure permission matrix and representative scope checks.

Invariants:
    - Admins and superadmins hold every permission and every scope
    - Representatives write/delete only inside an ACTIVE (branch_id, year_id) assignment
    - Students read content entities, never write
    - Unknown roles have no permissions and empty filters (see nothing)

Design Decisions:
    - UserContext is a plain dataclass built by services/user_context.py, so
      everything here is testable without a database
    - check_permission raises ForbiddenError; can_* helpers return bool for
      callers that branch instead of failing
"""

from dataclasses import dataclass, field
from uuid import UUID

from pecup.core.domain_types import (
    AdminRole, PermissionAction, PermissionEntity, Role,
)
from pecup.core.errors import ForbiddenError

_CONTENT_ENTITIES = frozenset({
    PermissionEntity.RESOURCES,
    PermissionEntity.REMINDERS,
    PermissionEntity.RECENT_UPDATES,
    PermissionEntity.EXAMS,
})
_ALL_ENTITIES = frozenset(PermissionEntity)
_STAFF_ROLES = (Role.ADMIN, Role.SUPERADMIN, Role.REPRESENTATIVE)


@dataclass(frozen=True)
class RepresentativeAssignment:
    branch_id: UUID
    year_id: UUID
    active: bool = True
    branch_code: str = ""
    batch_year: int = 0


@dataclass
class UserContext:
    id: UUID
    email: str
    name: str
    role: str
    year: int | None = None
    branch: str | None = None
    branch_id: UUID | None = None
    year_id: UUID | None = None
    semester_id: UUID | None = None
    representatives: list[RepresentativeAssignment] = field(default_factory=list)

    @property
    def is_admin(self) -> bool:
        return self.role in (Role.ADMIN, Role.SUPERADMIN)

    @property
    def is_staff(self) -> bool:
        return self.role in _STAFF_ROLES


@dataclass(frozen=True)
class AdminContext:
    email: str
    role: AdminRole


@dataclass(frozen=True)
class Permissions:
    read: frozenset[PermissionEntity]
    write: frozenset[PermissionEntity]
    delete: frozenset[PermissionEntity]
    can_promote_semester: bool = False

    def allows(self, action: PermissionAction, entity: PermissionEntity) -> bool:
        action, entity = PermissionAction(action), PermissionEntity(entity)
        granted = {
            PermissionAction.READ: self.read,
            PermissionAction.WRITE: self.write,
            PermissionAction.DELETE: self.delete,
        }[action]
        return entity in granted

    def to_dict(self) -> dict:
        """{"canRead": {entity: bool}, ..., "canPromoteSemester": bool}."""
        def flags(granted: frozenset[PermissionEntity]) -> dict[str, bool]:
            return {entity.value: entity in granted for entity in PermissionEntity}

        return {
            "canRead": flags(self.read),
            "canWrite": flags(self.write),
            "canDelete": flags(self.delete),
            "canPromoteSemester": self.can_promote_semester,
        }


_NO_PERMISSIONS = Permissions(frozenset(), frozenset(), frozenset())


def permissions_for(context: UserContext | None) -> Permissions:
    """Role permission matrix."""
    if context is None:
        return _NO_PERMISSIONS
    if context.role == Role.STUDENT:
        return Permissions(_CONTENT_ENTITIES, frozenset(), frozenset())
    if context.role == Role.REPRESENTATIVE:
        return Permissions(
            _CONTENT_ENTITIES, _CONTENT_ENTITIES, _CONTENT_ENTITIES,
            can_promote_semester=True,
        )
    if context.role in (Role.ADMIN, Role.SUPERADMIN):
        return Permissions(
            _ALL_ENTITIES, _ALL_ENTITIES, _ALL_ENTITIES,
            can_promote_semester=True,
        )
    return _NO_PERMISSIONS


def has_scope(context: UserContext, branch_id: UUID, year_id: UUID) -> bool:
    """True when the caller may manage content for (branch_id, year_id)."""
    if context.is_admin:
        return True
    if context.role == Role.REPRESENTATIVE:
        return any(
            rep.active and rep.branch_id == branch_id and rep.year_id == year_id
            for rep in context.representatives
        )
    return False


def check_permission(
    context: UserContext,
    action: PermissionAction,
    entity: PermissionEntity,
    branch_id: UUID | None = None,
    year_id: UUID | None = None,
) -> None:
    if not permissions_for(context).allows(action, entity):
        raise ForbiddenError("Forbidden: Insufficient permissions")
    if (
        context.role == Role.REPRESENTATIVE
        and branch_id is not None
        and year_id is not None
        and not has_scope(context, branch_id, year_id)
    ):
        raise ForbiddenError("Forbidden: Outside assigned scope")


def can_promote_semester(context: UserContext, branch_id: UUID, year_id: UUID) -> bool:
    return permissions_for(context).can_promote_semester and has_scope(
        context, branch_id, year_id,
    )


@dataclass(frozen=True)
class ResourceFilter:
    """None means "no restriction"; an empty list means "match nothing"."""
    branch_ids: list[UUID] | None = None
    year_ids: list[UUID] | None = None
    semester_ids: list[UUID] | None = None


def resource_filter(context: UserContext) -> ResourceFilter:
    if context.role == Role.STUDENT:
        return ResourceFilter(
            branch_ids=[context.branch_id] if context.branch_id else None,
            year_ids=[context.year_id] if context.year_id else None,
            semester_ids=[context.semester_id] if context.semester_id else None,
        )
    if context.role == Role.REPRESENTATIVE:
        active = [rep for rep in context.representatives if rep.active]
        return ResourceFilter(
            branch_ids=[rep.branch_id for rep in active],
            year_ids=[rep.year_id for rep in active],
        )
    if context.is_admin:
        return ResourceFilter()
    return ResourceFilter(branch_ids=[], year_ids=[], semester_ids=[])


def matches_filter(
    rules: ResourceFilter,
    branch_id: UUID | None,
    year_id: UUID | None,
    semester_id: UUID | None,
) -> bool:
    """Apply a ResourceFilter to one row's lookup ids."""
    for allowed, value in (
        (rules.branch_ids, branch_id),
        (rules.year_ids, year_id),
        (rules.semester_ids, semester_id),
    ):
        if allowed is not None and value not in allowed:
            return False
    return True


def role_satisfies(role: str, min_role: AdminRole) -> bool:
    """superadmin >= admin; any other role satisfies nothing."""
    if role == AdminRole.SUPERADMIN:
        return True
    return role == AdminRole.ADMIN and min_role == AdminRole.ADMIN


def audit_role(role: str) -> str:
    """Audit rows only record admin/superadmin; representatives log as admin."""
    if role == Role.SUPERADMIN:
        return AdminRole.SUPERADMIN.value
    return AdminRole.ADMIN.value
