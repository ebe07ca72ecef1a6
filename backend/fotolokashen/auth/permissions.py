"""Permission predicates.

Three scopes:
  - Ownership:  the acting user created / owns the record
  - Global:     site-wide role on the user row (user | staffer | super_admin)
  - Scoped:     role inside a team or project (viewer | editor | admin | owner)

All checks are pure functions of already-loaded data; routers turn a
False into a 403 (see auth.deps.require_permission).
"""

from __future__ import annotations

from typing import Protocol


class _HasRole(Protocol):
    id: str
    role: str


# ── Role sets ───────────────────────────────────────────────

GLOBAL_ROLES: tuple[str, ...] = ("user", "staffer", "super_admin")
MEMBER_ROLES: tuple[str, ...] = ("viewer", "editor", "admin", "owner")

STAFF_ROLES = {"staffer", "super_admin"}
MANAGER_ROLES = {"admin", "owner"}
EDITOR_ROLES = {"editor", "admin", "owner"}

GLOBAL_ROLE_NAMES: dict[str, str] = {
    "user": "User",
    "staffer": "Staff",
    "super_admin": "Super Admin",
}
MEMBER_ROLE_NAMES: dict[str, str] = {
    "viewer": "Viewer",
    "editor": "Editor",
    "admin": "Admin",
    "owner": "Owner",
}


def _global_role(user: _HasRole | None) -> str | None:
    if user is None:
        return None
    role = getattr(user, "role", None)
    # Enum members compare equal to their value; normalise for set lookups
    return getattr(role, "value", role) or "user"


# ── Ownership ───────────────────────────────────────────────

def can_edit_location(user: _HasRole, created_by: str) -> bool:
    """Only the creator or staff may edit a location's details."""
    return user.id == created_by or _global_role(user) in STAFF_ROLES


def can_delete_user_save(user: _HasRole, owner_id: str) -> bool:
    """Only the user who saved a location may remove it from their saves."""
    return user.id == owner_id


# ── Global (site-wide) ──────────────────────────────────────

def can_access_admin_panel(user: _HasRole | None) -> bool:
    return _global_role(user) in STAFF_ROLES


def can_view_user_management(user: _HasRole | None) -> bool:
    return _global_role(user) in STAFF_ROLES


def can_resend_verification_emails(user: _HasRole | None) -> bool:
    return _global_role(user) in STAFF_ROLES


def can_moderate_content(user: _HasRole | None) -> bool:
    return _global_role(user) in STAFF_ROLES


def can_manage_all_users(user: _HasRole | None) -> bool:
    return _global_role(user) == "super_admin"


def can_change_user_roles(user: _HasRole | None) -> bool:
    return _global_role(user) == "super_admin"


def can_send_system_emails(user: _HasRole | None) -> bool:
    return _global_role(user) == "super_admin"


def can_edit_email_templates(user: _HasRole | None) -> bool:
    return _global_role(user) == "super_admin"


# ── Team / project scoped ───────────────────────────────────

def can_manage_members(member_role: str | None) -> bool:
    """Invite / remove members, edit settings, send member emails."""
    return member_role in MANAGER_ROLES


def can_edit_content(member_role: str | None) -> bool:
    return member_role in EDITOR_ROLES


def can_delete_container(member_role: str | None) -> bool:
    """Delete a whole team or project: owner only."""
    return member_role == "owner"


def can_send_member_emails(user: _HasRole | None, member_role: str | None) -> bool:
    """Super admins may email any team or project; otherwise admin/owner of it."""
    if user is None:
        return False
    if _global_role(user) == "super_admin":
        return True
    return can_manage_members(member_role)


# ── Display / validation ────────────────────────────────────

def role_display_name(role: str) -> str:
    return GLOBAL_ROLE_NAMES.get(role, "Unknown")


def member_role_display_name(role: str) -> str:
    return MEMBER_ROLE_NAMES.get(role, "Unknown")


def is_valid_global_role(role: str) -> bool:
    return role in GLOBAL_ROLES


def is_valid_member_role(role: str) -> bool:
    return role in MEMBER_ROLES
