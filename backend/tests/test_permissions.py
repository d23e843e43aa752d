"""
Permission matrix tests.

Tests for:
- Normalization of wildcard, list, legacy and six-action shapes
- The evaluator used by the route decorators
- Checkbox cascade rules of the role editor
"""

import itertools
from uuid import uuid4

import pytest

from orderdesk.core.constants import ALL_ACTIONS, ALL_MODULES, Actions, Modules
from orderdesk.core.permissions import (
    PermissionContext,
    apply_permission_change,
    disabled_actions,
    empty_action_set,
    has_permission,
    normalize_action_set,
    normalize_permissions,
    permission_level,
)


CRUD = (Actions.READ, Actions.CREATE, Actions.UPDATE, Actions.DELETE)


def _implications_hold(actions):
    if actions[Actions.DELETE] and not actions[Actions.UPDATE]:
        return False
    if actions[Actions.UPDATE] and not actions[Actions.CREATE]:
        return False
    if actions[Actions.CREATE] and not actions[Actions.READ]:
        return False
    if (actions[Actions.STATUS] or actions[Actions.PRINT]) and not actions[Actions.READ]:
        return False
    return True


class TestNormalization:

    @pytest.mark.unit
    def test_wildcard_grants_every_action(self):
        assert normalize_action_set("*") == {action: True for action in ALL_ACTIONS}

    @pytest.mark.unit
    def test_action_list_is_closed_upward(self):
        actions = normalize_action_set(["delete"])

        assert actions[Actions.DELETE]
        assert actions[Actions.UPDATE]
        assert actions[Actions.CREATE]
        assert actions[Actions.READ]
        assert not actions[Actions.STATUS]
        assert not actions[Actions.PRINT]

    @pytest.mark.unit
    def test_legacy_view_only(self):
        actions = normalize_action_set({"view": True, "edit": False, "manage": False})

        assert actions[Actions.READ]
        assert actions[Actions.PRINT]
        assert not actions[Actions.CREATE]
        assert not actions[Actions.UPDATE]
        assert not actions[Actions.DELETE]
        assert not actions[Actions.STATUS]

    @pytest.mark.unit
    def test_legacy_edit_includes_view_and_status(self):
        actions = normalize_action_set({"edit": True})

        assert actions[Actions.READ]
        assert actions[Actions.CREATE]
        assert actions[Actions.UPDATE]
        assert actions[Actions.STATUS]
        assert not actions[Actions.DELETE]

    @pytest.mark.unit
    def test_legacy_manage_grants_everything(self):
        assert all(normalize_action_set({"manage": True}).values())

    @pytest.mark.unit
    def test_portuguese_legacy_keys(self):
        actions = normalize_action_set({"visualizar": True, "editar": True, "excluir": False})

        assert actions[Actions.UPDATE]
        assert not actions[Actions.DELETE]

    @pytest.mark.unit
    def test_six_action_update_implies_create_and_read(self):
        actions = normalize_action_set({"update": True})

        assert actions[Actions.READ]
        assert actions[Actions.CREATE]
        assert not actions[Actions.DELETE]
        assert not actions[Actions.STATUS]

    @pytest.mark.unit
    def test_garbage_normalizes_to_no_access(self):
        assert normalize_action_set(42) == empty_action_set()
        assert normalize_action_set(None) == empty_action_set()

    @pytest.mark.unit
    def test_every_module_present_and_unknown_dropped(self):
        permissions = normalize_permissions({"orders": ["read"], "reports": "*"})

        assert set(permissions) == set(ALL_MODULES)
        assert permissions[Modules.ORDERS][Actions.READ]
        assert not any(permissions[Modules.PRODUCTS].values())

    @pytest.mark.unit
    def test_module_aliases_are_merged(self):
        permissions = normalize_permissions({"pedidos": {"view": True}, "orders": {"delete": True}})

        assert permissions[Modules.ORDERS][Actions.DELETE]
        assert permissions[Modules.ORDERS][Actions.PRINT]

    @pytest.mark.unit
    def test_top_level_wildcard(self):
        permissions = normalize_permissions("*")

        assert all(all(actions.values()) for actions in permissions.values())

    @pytest.mark.unit
    def test_normalization_is_idempotent(self):
        once = normalize_permissions({"orders": {"edit": True}, "clientes": ["criar"]})

        assert normalize_permissions(once) == once

    @pytest.mark.unit
    def test_legacy_and_six_action_agree_on_crud(self):
        for view, edit, manage in itertools.product((False, True), repeat=3):
            legacy = normalize_permissions({"orders": {"view": view, "edit": edit, "manage": manage}})
            modern = normalize_permissions({"orders": {
                "read": view or edit or manage,
                "create": edit or manage,
                "update": edit or manage,
                "delete": manage,
            }})

            for action in CRUD:
                assert has_permission(legacy, "orders", action) == has_permission(modern, "orders", action), (
                    view, edit, manage, action
                )


class TestEvaluator:

    @pytest.mark.unit
    def test_platform_admin_is_always_allowed(self):
        assert has_permission({}, "orders", "delete", is_platform_admin=True)
        assert has_permission(None, "anything", "print", is_platform_admin=True)

    @pytest.mark.unit
    def test_module_wildcard(self):
        assert has_permission({"orders": "*"}, "orders", "delete")

    @pytest.mark.unit
    def test_absent_module_is_denied(self):
        assert not has_permission({"orders": "*"}, "customers", "read")

    @pytest.mark.unit
    def test_non_dict_permissions_are_denied(self):
        assert not has_permission(None, "orders", "read")
        assert not has_permission("*", "orders", "read")
        assert not has_permission(["orders"], "orders", "read")

    @pytest.mark.unit
    def test_read_is_granted_by_update_or_delete(self):
        assert has_permission({"orders": {"update": True}}, "orders", "read")
        assert has_permission({"orders": {"delete": True}}, "orders", "read")
        assert not has_permission({"orders": {"create": True}}, "orders", "update")

    @pytest.mark.unit
    def test_update_is_granted_by_delete(self):
        assert has_permission({"orders": {"delete": True}}, "orders", "update")

    @pytest.mark.unit
    def test_other_actions_are_exact(self):
        assert not has_permission({"orders": {"read": True}}, "orders", "status")
        assert has_permission({"orders": {"status": True}}, "orders", "status")

    @pytest.mark.unit
    def test_raw_legacy_entry(self):
        assert has_permission({"orders": {"edit": True}}, "orders", "update")
        assert not has_permission({"orders": {"edit": True}}, "orders", "delete")

    @pytest.mark.unit
    def test_aliases_on_both_sides(self):
        assert has_permission({"pedidos": {"read": True}}, "orders", "read")
        assert has_permission({"orders": {"update": True}}, "pedidos", "editar")

    @pytest.mark.unit
    def test_does_not_mutate_input(self):
        permissions = {"orders": {"edit": True}}
        has_permission(permissions, "orders", "read")

        assert permissions == {"orders": {"edit": True}}

    @pytest.mark.unit
    def test_context_can(self):
        context = PermissionContext(
            user_id=uuid4(),
            user_name="Test",
            permissions=normalize_permissions({"orders": ["read"]}),
        )

        assert context.can("orders", "read")
        assert not context.can("orders", "create")

        admin = PermissionContext(user_id=uuid4(), user_name="Admin", is_platform_admin=True)
        assert admin.can("settings", "update")


class TestCascade:

    @pytest.mark.rbac
    def test_delete_on_switches_on_everything_below(self):
        updated = apply_permission_change(normalize_permissions({}), "orders", "delete", True)

        for action in CRUD:
            assert updated["orders"][action]

    @pytest.mark.rbac
    def test_read_off_switches_off_everything(self):
        updated = apply_permission_change(normalize_permissions("*"), "orders", "read", False)

        assert not any(updated["orders"].values())

    @pytest.mark.rbac
    def test_create_off_switches_off_update_and_delete(self):
        updated = apply_permission_change(normalize_permissions("*"), "orders", "create", False)

        assert updated["orders"][Actions.READ]
        assert not updated["orders"][Actions.UPDATE]
        assert not updated["orders"][Actions.DELETE]
        assert updated["orders"][Actions.STATUS]

    @pytest.mark.rbac
    def test_update_off_only_takes_delete_along(self):
        updated = apply_permission_change(normalize_permissions("*"), "orders", "update", False)

        assert updated["orders"][Actions.CREATE]
        assert not updated["orders"][Actions.DELETE]

    @pytest.mark.rbac
    def test_delete_off_leaves_update(self):
        updated = apply_permission_change(normalize_permissions("*"), "orders", "delete", False)

        assert updated["orders"][Actions.UPDATE]
        assert not updated["orders"][Actions.DELETE]

    @pytest.mark.rbac
    def test_status_and_print_need_read(self):
        updated = apply_permission_change(normalize_permissions({}), "orders", "print", True)

        assert updated["orders"][Actions.READ]
        assert not updated["orders"][Actions.CREATE]

    @pytest.mark.rbac
    def test_other_modules_untouched(self):
        before = normalize_permissions({"customers": ["read"]})
        updated = apply_permission_change(before, "orders", "delete", True)

        assert updated["customers"] == before["customers"]

    @pytest.mark.rbac
    def test_input_is_not_modified(self):
        before = normalize_permissions({})
        apply_permission_change(before, "orders", "delete", True)

        assert not any(before["orders"].values())

    @pytest.mark.rbac
    def test_unknown_module_or_action_is_ignored(self):
        before = normalize_permissions({"orders": ["read"]})

        assert apply_permission_change(before, "reports", "read", True) == before
        assert apply_permission_change(before, "orders", "export", True) == before

    @pytest.mark.rbac
    def test_toggle_is_idempotent(self):
        start = normalize_permissions({"orders": ["read", "status"]})
        for action in ALL_ACTIONS:
            for value in (True, False):
                once = apply_permission_change(start, "orders", action, value)
                twice = apply_permission_change(once, "orders", action, value)
                assert once == twice, (action, value)

    @pytest.mark.rbac
    def test_implications_hold_after_any_sequence(self):
        toggles = [(action, value) for action in ALL_ACTIONS for value in (True, False)]

        for sequence in itertools.product(toggles, repeat=3):
            permissions = normalize_permissions({})
            for action, value in sequence:
                permissions = apply_permission_change(permissions, "orders", action, value)
            assert _implications_hold(permissions["orders"]), sequence


class TestEditorHelpers:

    @pytest.mark.rbac
    def test_disabled_checkboxes(self):
        assert disabled_actions(normalize_action_set(["delete"])) == {"read", "create", "update"}
        assert disabled_actions(normalize_action_set(["create"])) == {"read"}
        assert disabled_actions(normalize_action_set(["read"])) == frozenset()

    @pytest.mark.rbac
    def test_permission_level(self):
        assert permission_level(normalize_action_set("*")) == "delete"
        assert permission_level(normalize_action_set(["update"])) == "update"
        assert permission_level(normalize_action_set(["print"])) == "read"
        assert permission_level(empty_action_set()) == "none"
        assert permission_level(None) == "none"
