"""Tests for role parsing and capability checks."""

import pytest

from banking_client.roles import (
    Role,
    has_any_role,
    has_role,
    parse_roles,
    primary_role,
)


class TestRoleParse:
    """Tests for Role.parse."""

    @pytest.mark.parametrize(
        "raw", ["ROLE_MANAGER", "MANAGER", "manager", "role_manager", " ROLE_MANAGER "]
    )
    def test_accepts_prefixed_and_bare_tags(self, raw):
        assert Role.parse(raw) is Role.MANAGER

    def test_unknown_tag_raises(self):
        with pytest.raises(ValueError):
            Role.parse("ROLE_AUDITOR")

    def test_wire_name(self):
        assert Role.TELLER.wire_name == "ROLE_TELLER"


class TestParseRoles:
    """Tests for parse_roles."""

    def test_skips_unknown_tags(self):
        roles = parse_roles(["ROLE_CUSTOMER", "ROLE_AUDITOR", "ADMIN"])
        assert roles == frozenset({Role.CUSTOMER, Role.ADMIN})

    def test_none_is_empty(self):
        assert parse_roles(None) == frozenset()

    def test_duplicates_collapse(self):
        assert parse_roles(["ROLE_TELLER", "TELLER"]) == frozenset({Role.TELLER})


class TestCapabilityChecks:
    """Tests for has_role, has_any_role and primary_role."""

    def test_has_role(self):
        assert has_role({Role.TELLER}, Role.TELLER) is True
        assert has_role({Role.TELLER}, Role.MANAGER) is False

    def test_has_any_role_intersection(self):
        assert has_any_role({Role.CUSTOMER, Role.TELLER}, {Role.TELLER}) is True
        assert has_any_role({Role.CUSTOMER}, {Role.MANAGER, Role.ADMIN}) is False

    def test_has_any_role_empty(self):
        assert has_any_role(set(), {Role.CUSTOMER}) is False

    def test_primary_role_precedence(self):
        assert primary_role({Role.CUSTOMER, Role.MANAGER}) is Role.MANAGER
        assert primary_role({Role.TELLER, Role.ADMIN}) is Role.ADMIN
        assert primary_role({Role.CUSTOMER}) is Role.CUSTOMER

    def test_primary_role_of_nothing(self):
        assert primary_role(set()) is None
