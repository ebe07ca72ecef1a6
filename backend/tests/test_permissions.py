"""Tests for permission predicates."""

from types import SimpleNamespace

import pytest

from fotolokashen.auth import permissions as perms
from fotolokashen.models.user import UserRole


def _user(role="user", user_id="u-1"):
    return SimpleNamespace(id=user_id, role=role)


@pytest.mark.unit
class TestOwnership:

    def test_creator_can_edit_location(self):
        assert perms.can_edit_location(_user(), "u-1")

    def test_other_user_cannot_edit_location(self):
        assert not perms.can_edit_location(_user(), "u-2")

    @pytest.mark.parametrize("role", ["staffer", "super_admin"])
    def test_staff_can_edit_any_location(self, role):
        assert perms.can_edit_location(_user(role), "u-2")

    def test_only_owner_deletes_save(self):
        assert perms.can_delete_user_save(_user(), "u-1")
        assert not perms.can_delete_user_save(_user("super_admin"), "u-2")


@pytest.mark.unit
class TestGlobalRoles:

    @pytest.mark.parametrize(
        "check",
        [
            perms.can_access_admin_panel,
            perms.can_view_user_management,
            perms.can_resend_verification_emails,
            perms.can_moderate_content,
        ],
    )
    def test_staff_checks(self, check):
        assert not check(_user("user"))
        assert check(_user("staffer"))
        assert check(_user("super_admin"))
        assert not check(None)

    @pytest.mark.parametrize(
        "check",
        [
            perms.can_manage_all_users,
            perms.can_change_user_roles,
            perms.can_send_system_emails,
            perms.can_edit_email_templates,
        ],
    )
    def test_super_admin_checks(self, check):
        assert not check(_user("user"))
        assert not check(_user("staffer"))
        assert check(_user("super_admin"))

    def test_enum_roles_accepted(self):
        assert perms.can_access_admin_panel(_user(UserRole.STAFFER))
        assert not perms.can_manage_all_users(_user(UserRole.STAFFER))

    def test_missing_role_is_plain_user(self):
        assert not perms.can_access_admin_panel(_user(None))


@pytest.mark.unit
class TestMemberRoles:

    @pytest.mark.parametrize(
        "role,manage,edit,delete",
        [
            ("viewer", False, False, False),
            ("editor", False, True, False),
            ("admin", True, True, False),
            ("owner", True, True, True),
            (None, False, False, False),
        ],
    )
    def test_scoped_checks(self, role, manage, edit, delete):
        assert perms.can_manage_members(role) is manage
        assert perms.can_edit_content(role) is edit
        assert perms.can_delete_container(role) is delete

    def test_member_emails(self):
        assert perms.can_send_member_emails(_user("super_admin"), None)
        assert perms.can_send_member_emails(_user(), "admin")
        assert not perms.can_send_member_emails(_user("staffer"), "editor")
        assert not perms.can_send_member_emails(None, "owner")


@pytest.mark.unit
class TestDisplayAndValidation:

    def test_display_names(self):
        assert perms.role_display_name("super_admin") == "Super Admin"
        assert perms.role_display_name("staffer") == "Staff"
        assert perms.role_display_name("root") == "Unknown"
        assert perms.member_role_display_name("owner") == "Owner"
        assert perms.member_role_display_name("guest") == "Unknown"

    def test_validators(self):
        assert perms.is_valid_global_role("staffer")
        assert not perms.is_valid_global_role("owner")
        assert perms.is_valid_member_role("editor")
        assert not perms.is_valid_member_role("super_admin")
