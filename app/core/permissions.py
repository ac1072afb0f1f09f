"""Who may see which content rows and who may change them.

Every read of posts or comments composes a :class:`VisibilityFilter` into its
query, and every update or delete goes through :func:`authorize_mutation`.
"""
import enum
from dataclasses import dataclass
from sqlalchemy import true
from app.core.errors import PermissionDenied


class Role(str, enum.Enum):
    USER = "user"
    ADMIN = "admin"


class ContentState(str, enum.Enum):
    ACTIVE = "active"
    EDITED = "edited"
    EDITED_BY_ADMIN = "edited_by_admin"
    DELETED = "deleted"


@dataclass(frozen=True)
class Requester:
    """Identity resolved from a bearer token."""

    user_id: int
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


@dataclass(frozen=True)
class VisibilityFilter:
    """Row-level soft-delete predicate shared by every query path."""

    include_deleted: bool = False

    def clause(self, model):
        if self.include_deleted:
            return true()
        return model.deleted.is_(False)

    def apply(self, query, model):
        if self.include_deleted:
            return query
        return query.filter(self.clause(model))

    def admits(self, row) -> bool:
        return self.include_deleted or not row.deleted


PUBLIC_VISIBILITY = VisibilityFilter(include_deleted=False)
ADMIN_VISIBILITY = VisibilityFilter(include_deleted=True)


def visibility_for(requester: Requester) -> VisibilityFilter:
    # owners get no exception for their own deleted rows
    return ADMIN_VISIBILITY if requester.is_admin else PUBLIC_VISIBILITY


@dataclass(frozen=True)
class Capability:
    is_owner: bool
    is_admin: bool

    @property
    def is_moderation(self) -> bool:
        """An admin acting on someone else's row."""
        return self.is_admin and not self.is_owner


def authorize_mutation(requester: Requester, row) -> Capability:
    """Single gate for update and delete of a post or comment."""
    capability = Capability(
        is_owner=requester.user_id == row.user_id,
        is_admin=requester.is_admin,
    )
    if not (capability.is_owner or capability.is_admin):
        raise PermissionDenied()
    return capability


def apply_edit(row, content: str, capability: Capability) -> None:
    row.content = content
    row.edited = True
    # sticky: an owner edit never clears a previous admin edit
    if capability.is_moderation:
        row.edited_by_admin = True


def apply_soft_delete(row) -> None:
    # comments under a deleted post are left as they are
    row.deleted = True


def content_state(row) -> ContentState:
    if row.deleted:
        return ContentState.DELETED
    if row.edited_by_admin:
        return ContentState.EDITED_BY_ADMIN
    if row.edited:
        return ContentState.EDITED
    return ContentState.ACTIVE
