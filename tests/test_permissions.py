import unittest

from agrovision.core.authorization import (
    allowed_client_ids,
    can_access_client,
    can_act_on_account,
    ensure_client_access,
    filter_client_ids,
    has_permission,
)
from agrovision.core.errors import Unauthorized
from agrovision.core.permissions import (
    PERMISSION_PAIRS,
    AccessScope,
    Action,
    PermissionMatrix,
    Resource,
    Role,
    default_permissions,
)
from agrovision.db import models


def _account(role: Role, scope: AccessScope, client_ids=(), permissions=None, account_id="acc-1") -> models.Account:
    account = models.Account(
        id=account_id,
        name="Teste",
        email=f"{account_id}@agro.test",
        password_hash="x",
        role=role.value,
        status="ativo",
        access_scope=scope.value,
        permissions=(permissions or default_permissions(role)).model_dump(),
    )
    account.client_ids = list(client_ids)
    return account


class PermissionMatrixTests(unittest.TestCase):
    def test_pairs_cover_crud_resources_and_reports(self):
        self.assertIn((Resource.CROPS, Action.DELETE), PERMISSION_PAIRS)
        self.assertIn((Resource.REPORTS, Action.EXPORT), PERMISSION_PAIRS)
        self.assertNotIn((Resource.REPORTS, Action.DELETE), PERMISSION_PAIRS)
        self.assertNotIn((Resource.AREAS, Action.EXPORT), PERMISSION_PAIRS)

    def test_unknown_pair_is_rejected(self):
        with self.assertRaises(ValueError):
            PermissionMatrix().allows(Resource.AREAS, Action.EXPORT)
        with self.assertRaises(ValueError):
            PermissionMatrix().allows("tratores", "visualizar")

    def test_extra_resource_keys_are_rejected(self):
        with self.assertRaises(ValueError):
            PermissionMatrix.model_validate({"tratores": {"visualizar": True}})

    def test_admin_template_allows_everything(self):
        matrix = default_permissions(Role.ADMIN)
        for resource, action in PERMISSION_PAIRS:
            self.assertTrue(matrix.allows(resource, action), (resource, action))

    def test_manager_template(self):
        matrix = default_permissions(Role.MANAGER)
        self.assertTrue(matrix.allows(Resource.AREAS, Action.EDIT))
        self.assertFalse(matrix.allows(Resource.AREAS, Action.DELETE))
        self.assertTrue(matrix.allows(Resource.USERS, Action.VIEW))
        self.assertFalse(matrix.allows(Resource.USERS, Action.CREATE))
        self.assertTrue(matrix.allows(Resource.REPORTS, Action.EXPORT))

    def test_operator_and_viewer_templates(self):
        operator = default_permissions(Role.OPERATOR)
        self.assertTrue(operator.allows(Resource.CROPS, Action.CREATE))
        self.assertFalse(operator.allows(Resource.CLIENTS, Action.CREATE))
        self.assertFalse(operator.allows(Resource.USERS, Action.VIEW))
        self.assertFalse(operator.allows(Resource.REPORTS, Action.EXPORT))

        viewer = default_permissions(Role.VIEWER)
        self.assertTrue(viewer.allows(Resource.LOSSES, Action.VIEW))
        self.assertFalse(viewer.allows(Resource.LOSSES, Action.CREATE))
        self.assertTrue(viewer.allows(Resource.REPORTS, Action.VIEW))

    def test_partial_matrix_defaults_to_denied(self):
        matrix = PermissionMatrix.model_validate({"areas": {"visualizar": True}})
        self.assertTrue(matrix.allows(Resource.AREAS, Action.VIEW))
        self.assertFalse(matrix.allows(Resource.AREAS, Action.CREATE))
        self.assertFalse(matrix.allows(Resource.CLIENTS, Action.VIEW))


class AuthorizationHelperTests(unittest.TestCase):
    def test_admin_bypasses_permission_flags(self):
        admin = _account(Role.ADMIN, AccessScope.GLOBAL, permissions=PermissionMatrix())
        self.assertTrue(has_permission(admin, Resource.LOSSES, Action.DELETE))

    def test_non_admin_needs_flag(self):
        viewer = _account(Role.VIEWER, AccessScope.CLIENT, ["c1"])
        self.assertTrue(has_permission(viewer, Resource.AREAS, Action.VIEW))
        self.assertFalse(has_permission(viewer, Resource.AREAS, Action.EDIT))

    def test_global_access_passes_client_checks(self):
        admin = _account(Role.ADMIN, AccessScope.GLOBAL)
        self.assertTrue(can_access_client(admin, "any-client"))
        self.assertIsNone(allowed_client_ids(admin))
        ensure_client_access(admin, "any-client")

    def test_scoped_account_limited_to_linked_clients(self):
        operator = _account(Role.OPERATOR, AccessScope.CLIENT, ["c1", "c2"])
        self.assertTrue(can_access_client(operator, "c1"))
        self.assertFalse(can_access_client(operator, "c3"))
        self.assertEqual(allowed_client_ids(operator), ["c1", "c2"])
        with self.assertRaises(Unauthorized):
            ensure_client_access(operator, "c3")

    def test_scoped_account_without_clients_is_denied(self):
        orphan = _account(Role.VIEWER, AccessScope.CLIENT, [])
        with self.assertRaises(Unauthorized):
            allowed_client_ids(orphan)

    def test_self_or_admin(self):
        admin = _account(Role.ADMIN, AccessScope.GLOBAL, account_id="admin")
        manager = _account(Role.MANAGER, AccessScope.CLIENT, ["c1"], account_id="manager")
        teammate = _account(Role.OPERATOR, AccessScope.CLIENT, ["c1"], account_id="teammate")
        stranger = _account(Role.OPERATOR, AccessScope.CLIENT, ["c9"], account_id="stranger")

        self.assertTrue(can_act_on_account(admin, stranger, stranger.id))
        self.assertTrue(can_act_on_account(stranger, stranger, stranger.id))
        self.assertTrue(can_act_on_account(manager, teammate, teammate.id))
        self.assertFalse(can_act_on_account(manager, stranger, stranger.id))
        self.assertFalse(can_act_on_account(teammate, manager, manager.id))

    def test_self_or_admin_accepts_client_scoped_admin(self):
        admin = _account(Role.ADMIN, AccessScope.CLIENT, ["c1"], account_id="scoped-admin")
        stranger = _account(Role.OPERATOR, AccessScope.CLIENT, ["c9"], account_id="stranger")

        self.assertTrue(can_act_on_account(admin, stranger, stranger.id))

    def test_filter_client_ids_drops_foreign_clients(self):
        manager = _account(Role.MANAGER, AccessScope.CLIENT, ["c1", "c2"])
        self.assertEqual(filter_client_ids(manager, ["c1", "c3"]), ["c1"])
        admin = _account(Role.ADMIN, AccessScope.GLOBAL)
        self.assertEqual(filter_client_ids(admin, ["c1", "c3"]), ["c1", "c3"])


if __name__ == "__main__":
    unittest.main()
