"""
Unit Tests for role assignment rules
"""
import pytest
from types import SimpleNamespace

from contest_portal.core.exceptions import AuthorizationError, InvalidStateError
from contest_portal.models.user import UserRole
from contest_portal.services.user_service import check_role_change


def _user(user_id, role):
    return SimpleNamespace(id=user_id, role=role)


ADMIN = _user(1, UserRole.ADMIN)
SUPER = _user(2, UserRole.SUPER_ADMIN)


class TestAdminActor:

    @pytest.mark.parametrize("new_role", [UserRole.USER, UserRole.ADMIN])
    def test_can_assign_user_and_admin(self, new_role):
        check_role_change(ADMIN, _user(10, UserRole.USER), new_role)

    def test_cannot_grant_super_admin(self):
        with pytest.raises(AuthorizationError):
            check_role_change(ADMIN, _user(10, UserRole.USER), UserRole.SUPER_ADMIN)

    def test_cannot_touch_super_admin(self):
        with pytest.raises(AuthorizationError):
            check_role_change(ADMIN, _user(11, UserRole.SUPER_ADMIN), UserRole.USER)

    def test_can_demote_self(self):
        check_role_change(ADMIN, ADMIN, UserRole.USER)


class TestSuperAdminActor:

    @pytest.mark.parametrize("new_role", list(UserRole))
    def test_can_assign_any_role(self, new_role):
        check_role_change(SUPER, _user(10, UserRole.USER), new_role)

    def test_can_demote_other_super_admin(self):
        check_role_change(SUPER, _user(12, UserRole.SUPER_ADMIN), UserRole.ADMIN)

    def test_cannot_demote_self(self):
        with pytest.raises(InvalidStateError):
            check_role_change(SUPER, SUPER, UserRole.ADMIN)

    def test_reassigning_own_role_is_allowed(self):
        check_role_change(SUPER, SUPER, UserRole.SUPER_ADMIN)


def test_regular_user_cannot_assign_roles():
    with pytest.raises(AuthorizationError):
        check_role_change(_user(3, UserRole.USER), _user(10, UserRole.USER), UserRole.USER)
