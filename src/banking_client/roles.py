"""Role tags and capability checks."""

import logging
from collections.abc import Iterable
from enum import Enum

logger = logging.getLogger(__name__)

ROLE_PREFIX = "ROLE_"


class Role(str, Enum):
    """Roles a portal user can hold."""

    CUSTOMER = "CUSTOMER"
    TELLER = "TELLER"
    MANAGER = "MANAGER"
    ADMIN = "ADMIN"

    @classmethod
    def parse(cls, value: "str | Role") -> "Role":
        """Parse a role tag, accepting both ``ROLE_MANAGER`` and ``manager``.

        Raises:
            ValueError: If the tag is not a known role.
        """
        if isinstance(value, Role):
            return value
        tag = str(value).strip().upper()
        if tag.startswith(ROLE_PREFIX):
            tag = tag[len(ROLE_PREFIX) :]
        return cls(tag)

    @property
    def wire_name(self) -> str:
        """Name used by the backend (``ROLE_`` prefixed)."""
        return f"{ROLE_PREFIX}{self.value}"


# Highest first; decides which layout a multi-role user lands on
ROLE_PRECEDENCE: tuple[Role, ...] = (
    Role.ADMIN,
    Role.MANAGER,
    Role.TELLER,
    Role.CUSTOMER,
)

STAFF_ROLES = frozenset({Role.TELLER, Role.MANAGER, Role.ADMIN})
APPROVER_ROLES = frozenset({Role.MANAGER, Role.ADMIN})


def parse_roles(values: Iterable[str | Role] | None) -> frozenset[Role]:
    """Parse role tags into a set, skipping unknown ones."""
    roles: set[Role] = set()
    for value in values or ():
        try:
            roles.add(Role.parse(value))
        except ValueError:
            logger.warning("Ignoring unknown role tag %r", value)
    return frozenset(roles)


def has_role(roles: Iterable[Role], role: Role) -> bool:
    return role in frozenset(roles)


def has_any_role(roles: Iterable[Role], allowed: Iterable[Role]) -> bool:
    """Return True if the two role sets intersect."""
    return not frozenset(roles).isdisjoint(allowed)


def primary_role(roles: Iterable[Role]) -> Role | None:
    """Pick the role whose layout should be mounted."""
    held = frozenset(roles)
    for role in ROLE_PRECEDENCE:
        if role in held:
            return role
    return None
