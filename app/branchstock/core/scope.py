from __future__ import annotations

from app.branchstock.core.error_catalog import AuthorizationError
from app.branchstock.core.metrics import metrics


OWNER_ROLES = frozenset({"owner"})
# Roles allowed to send stock to a branch they are not assigned to.
CROSS_BRANCH_SENDER_ROLES = frozenset({"employee"})


def _normalize_role(role: str | None) -> str:
    return (role or "").strip().lower()


def is_owner(user) -> bool:
    return _normalize_role(getattr(user, "role", None)) in OWNER_ROLES


class BranchAccessPolicy:
    """Branch-level permission rules, evaluated against an explicit user."""

    def __init__(
        self,
        *,
        owner_roles: frozenset[str] = OWNER_ROLES,
        cross_branch_sender_roles: frozenset[str] = CROSS_BRANCH_SENDER_ROLES,
    ):
        self.owner_roles = owner_roles
        self.cross_branch_sender_roles = cross_branch_sender_roles

    def has_permission_for_branch(self, user, branch_id: str | None) -> bool:
        if _normalize_role(user.role) in self.owner_roles:
            return True
        return bool(branch_id) and user.branch_id == branch_id

    def ensure_branch(self, user, branch_id: str, *, label: str = "this") -> None:
        if not self.has_permission_for_branch(user, branch_id):
            metrics.increment_branch_access_denied()
            raise AuthorizationError(f"Access denied to {label} branch", details={"branch_id": branch_id})

    def ensure_transfer(self, user, from_branch_id: str, to_branch_id: str) -> None:
        self.ensure_branch(user, from_branch_id, label="from")
        if _normalize_role(user.role) in self.cross_branch_sender_roles:
            return
        self.ensure_branch(user, to_branch_id, label="to")

    def pinned_branch(self, user, requested_branch_id: str | None, *, cross_branch: bool = False) -> str | None:
        """Branch a listing should be restricted to for ``user``."""
        if cross_branch:
            return None
        if _normalize_role(user.role) in self.owner_roles:
            return requested_branch_id
        return user.branch_id or requested_branch_id
