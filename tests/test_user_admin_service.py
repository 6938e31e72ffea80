"""Service-level tests for UserAdminService: role and status changes."""

import unittest

from newsdesk.core.errors import AuthorizationError, NotFoundError, ValidationError
from newsdesk.core.permissions import AccountStatus, Role
from newsdesk.models import User
from newsdesk.services.users import UserAdminService
from support import add_user, claims_for, make_session


class UserAdminTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.db = make_session()
        self.service = UserAdminService(self.db)
        self.reader = add_user(self.db, email="reader@example.com")
        self.mod = add_user(self.db, email="mod@example.com", role=Role.MODERATOR)
        self.admin = add_user(self.db, email="admin@example.com", role=Role.ADMIN)
        self.root = add_user(self.db, email="root@example.com", role=Role.SUPERADMIN)

    def tearDown(self) -> None:
        self.db.close()


class TestChangeRole(UserAdminTestCase):
    def test_admin_promotes_user_to_moderator(self) -> None:
        item = self.service.change_role(self.reader.id, Role.MODERATOR, claims_for(self.admin))
        self.assertEqual(item.role, Role.MODERATOR)
        self.assertEqual(Role(self.db.get(User, self.reader.id).role), Role.MODERATOR)

    def test_admin_cannot_grant_admin(self) -> None:
        with self.assertRaises(AuthorizationError):
            self.service.change_role(self.reader.id, Role.ADMIN, claims_for(self.admin))

    def test_admin_cannot_touch_superadmin(self) -> None:
        with self.assertRaises(AuthorizationError):
            self.service.change_role(self.root.id, Role.USER, claims_for(self.admin))

    def test_superadmin_manages_admins(self) -> None:
        item = self.service.change_role(self.admin.id, Role.USER, claims_for(self.root))
        self.assertEqual(item.role, Role.USER)

    def test_no_self_modification(self) -> None:
        with self.assertRaises(AuthorizationError) as ctx:
            self.service.change_role(self.root.id, Role.USER, claims_for(self.root))
        self.assertEqual(ctx.exception.code, "SELF_MODIFICATION")

    def test_moderator_cannot_manage_users(self) -> None:
        with self.assertRaises(AuthorizationError):
            self.service.change_role(self.reader.id, Role.WRITER, claims_for(self.mod))

    def test_unknown_target(self) -> None:
        with self.assertRaises(NotFoundError) as ctx:
            self.service.change_role("missing", Role.WRITER, claims_for(self.admin))
        self.assertEqual(ctx.exception.code, "USER_NOT_FOUND")


class TestSetStatus(UserAdminTestCase):
    def test_suspend_and_ban(self) -> None:
        item = self.service.set_status(self.reader.id, claims_for(self.admin), is_suspended=True)
        self.assertTrue(item.is_suspended)
        item = self.service.set_status(self.reader.id, claims_for(self.admin), status=AccountStatus.BANNED)
        self.assertEqual(item.status, AccountStatus.BANNED)
        self.assertFalse(self.db.get(User, self.reader.id).can_authenticate)

    def test_nothing_to_change(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            self.service.set_status(self.reader.id, claims_for(self.admin))
        self.assertEqual(ctx.exception.code, "MISSING_FIELDS")


class TestListUsers(UserAdminTestCase):
    def test_lists_without_credentials(self) -> None:
        items, meta = self.service.list_users(claims_for(self.admin))
        self.assertEqual(meta.total, 4)
        self.assertNotIn("password_hash", items[0].model_dump())

    def test_regular_user_denied(self) -> None:
        with self.assertRaises(AuthorizationError):
            self.service.list_users(claims_for(self.reader))


if __name__ == "__main__":
    unittest.main()
