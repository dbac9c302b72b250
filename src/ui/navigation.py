"""Role-gated navigation for the portal.

Each role mounts its own layout (``/customer``, ``/teller``, ``/manager``,
``/admin``). The sidebar menu is one hand-curated, ordered list of entries;
an entry is shown when the user holds at least one of its roles.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from banking_client.roles import (
    APPROVER_ROLES,
    STAFF_ROLES,
    Role,
    has_any_role,
    primary_role,
)

LOGIN_PATH = "/login"
REGISTER_PATH = "/register"

ALL_ROLES = frozenset(Role)
STAFF = STAFF_ROLES
APPROVERS = APPROVER_ROLES

LAYOUT_PREFIXES: dict[Role, str] = {
    Role.CUSTOMER: "/customer",
    Role.TELLER: "/teller",
    Role.MANAGER: "/manager",
    Role.ADMIN: "/admin",
}

LAYOUT_TITLES: dict[Role, str] = {
    Role.CUSTOMER: "Customer Portal",
    Role.TELLER: "Teller Desk",
    Role.MANAGER: "Manager Console",
    Role.ADMIN: "Administration",
}


@dataclass(frozen=True)
class MenuItem:
    label: str
    icon: str
    path: str
    allowed_roles: frozenset[Role]


PORTAL_MENU: tuple[MenuItem, ...] = (
    MenuItem("Dashboard", "🏠", "dashboard", ALL_ROLES),
    MenuItem("Transfer Between My Accounts", "🔁", "internal-transfer", ALL_ROLES),
    MenuItem(
        "External Transfer",
        "↗️",
        "external-transfer",
        frozenset({Role.CUSTOMER, Role.TELLER}),
    ),
    MenuItem("My Transactions", "🧾", "my-transfers", ALL_ROLES),
    MenuItem("Make a Payment", "💳", "make-payment", ALL_ROLES),
    MenuItem("My Groups", "👥", "my-groups", ALL_ROLES),
    MenuItem("Notifications", "🔔", "notifications", ALL_ROLES),
    MenuItem("Pending Transactions", "✅", "pending-transactions", APPROVERS),
    MenuItem("Deposit", "⬇️", "deposit", APPROVERS),
    MenuItem("Withdraw", "⬆️", "withdraw", APPROVERS),
    MenuItem("Create Account", "➕", "create-account", STAFF),
    MenuItem("All Accounts", "🏦", "all-accounts", STAFF),
    MenuItem("Check Account", "🔎", "check-account", STAFF),
    MenuItem("All Users", "🧑‍💼", "all-users", APPROVERS),
    MenuItem("All Transactions", "📊", "all-transactions", APPROVERS),
    MenuItem("All Groups", "🗂️", "all-groups", APPROVERS),
    MenuItem("Interest Management", "📈", "interest", APPROVERS),
    MenuItem("Account Features", "🧩", "features", APPROVERS),
    MenuItem("Profile", "👤", "profile", ALL_ROLES),
)

# Detail pages not in the menu inherit the roles of the list page linking to them
DETAIL_PAGE_PARENTS: dict[str, str] = {
    "account": "dashboard",
    "edit-account": "all-accounts",
    "user": "all-users",
    "groups": "my-groups",
    "create-group": "all-groups",
}


def filter_menu(items: Sequence[MenuItem], roles: Iterable[Role]) -> list[MenuItem]:
    """Return the entries visible to ``roles``, in their original order."""
    held = frozenset(roles)
    if not held:
        return []
    return [item for item in items if has_any_role(held, item.allowed_roles)]


def layout_prefix(roles: Iterable[Role]) -> str | None:
    role = primary_role(roles)
    if role is None:
        return None
    return LAYOUT_PREFIXES[role]


def landing_path(roles: Iterable[Role]) -> str:
    """Dashboard of the user's primary layout, or the login page."""
    prefix = layout_prefix(roles)
    if prefix is None:
        return LOGIN_PATH
    return f"{prefix}/dashboard"


def full_path(roles: Iterable[Role], item: MenuItem) -> str:
    prefix = layout_prefix(roles) or ""
    return f"{prefix}/{item.path}"


def parse_route(path: str) -> tuple[str | None, str, str | None]:
    """Split ``/manager/groups/7`` into ``("/manager", "groups", "7")``.

    Returns:
        Tuple of (layout prefix or None, page key, optional parameter).
        ``/login`` and ``/register`` have no prefix.
    """
    parts = [p for p in path.split("/") if p]
    if not parts:
        return None, "login", None
    prefix = f"/{parts[0]}"
    if prefix not in LAYOUT_PREFIXES.values():
        return None, parts[0], parts[1] if len(parts) > 1 else None
    page = parts[1] if len(parts) > 1 else "dashboard"
    param = parts[2] if len(parts) > 2 else None
    return prefix, page, param


def can_access(roles: Iterable[Role], page: str) -> bool:
    """Whether any menu entry for ``page`` is visible to ``roles``."""
    page = DETAIL_PAGE_PARENTS.get(page, page)
    return any(item.path == page for item in filter_menu(PORTAL_MENU, roles))
