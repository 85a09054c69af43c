"""
Role-based access control.

Three views of the same role model:

- PERMISSIONS: section x action matrix used to gate API endpoints
- ROUTES: which dashboard pages each role may open (SPA shell decisions)
- navigation_items(): the sidebar a role is shown

Roles are stored on the profiles row (admin, manager, teamlead, employee).
"""

import logging
from dataclasses import dataclass
from typing import Annotated, Callable, Coroutine, Any, Literal, Optional

from fastapi import Depends, HTTPException, status

from command_centre.auth.dependencies import CurrentMember, get_current_member

logger = logging.getLogger(__name__)

UserRole = Literal["admin", "manager", "teamlead", "employee"]
Section = Literal["projects", "clients", "employees", "finance", "reports", "settings"]
Action = Literal["view", "create", "edit", "delete"]

ROLES: tuple[str, ...] = ("admin", "manager", "teamlead", "employee")
SECTIONS: tuple[str, ...] = ("projects", "clients", "employees", "finance", "reports", "settings")
ACTIONS: tuple[str, ...] = ("view", "create", "edit", "delete")

ROLE_NAMES = {
    "admin": "Admin",
    "manager": "Manager",
    "teamlead": "Team Lead",
    "employee": "Employee",
}


def _grant(*actions: str) -> dict[str, bool]:
    return {action: action in actions for action in ACTIONS}


_ALL = ACTIONS
_NONE: tuple[str, ...] = ()

PERMISSIONS: dict[str, dict[str, dict[str, bool]]] = {
    "admin": {section: _grant(*_ALL) for section in SECTIONS},
    "manager": {
        "projects": _grant("view", "create", "edit"),
        "clients": _grant("view", "create", "edit"),
        "employees": _grant("view", "create", "edit"),
        "finance": _grant("view", "create", "edit"),
        "reports": _grant("view", "create"),
        "settings": _grant(*_NONE),
    },
    "teamlead": {
        "projects": _grant("view", "create", "edit"),
        "clients": _grant("view"),
        "employees": _grant("view"),
        "finance": _grant(*_NONE),
        "reports": _grant("view"),
        "settings": _grant(*_NONE),
    },
    "employee": {
        "projects": _grant("view"),
        "clients": _grant("view"),
        "employees": _grant(*_NONE),
        "finance": _grant(*_NONE),
        "reports": _grant(*_NONE),
        "settings": _grant(*_NONE),
    },
}


def has_permission(role: Optional[str], section: str, action: str) -> bool:
    """Unknown roles, sections and actions are denied."""
    if role is None:
        return False
    return PERMISSIONS.get(role, {}).get(section, {}).get(action, False)


# --- Route access (SPA shell) ---

@dataclass(frozen=True)
class RouteRule:
    path: str
    allowed_roles: tuple[str, ...] = ROLES
    employee_redirect: bool = True
    prefix: bool = False


PUBLIC_PATHS: tuple[str, ...] = ("/login", "/reset-password", "/unauthorized")

ROUTES: tuple[RouteRule, ...] = (
    RouteRule("/dashboard"),
    RouteRule("/projects"),
    RouteRule("/finance"),
    RouteRule("/clients"),
    RouteRule("/client/", prefix=True),
    RouteRule("/employees", allowed_roles=("admin", "manager")),
    RouteRule("/reports", allowed_roles=("admin", "manager")),
    RouteRule("/settings", allowed_roles=("admin",)),
    RouteRule("/time-tracking", employee_redirect=False),
    RouteRule("/employee-profile", employee_redirect=False),
)

LOGIN_PATH = "/login"
UNAUTHORIZED_PATH = "/unauthorized"
EMPLOYEE_HOME = "/time-tracking"


@dataclass(frozen=True)
class RouteDecision:
    allowed: bool
    redirect_to: Optional[str] = None
    reason: Optional[str] = None


def _normalize_path(path: str) -> str:
    path = "/" + path.strip().lstrip("/")
    if len(path) > 1:
        path = path.rstrip("/")
    return path


def _match_route(path: str) -> Optional[RouteRule]:
    for rule in ROUTES:
        if rule.prefix:
            if path.startswith(rule.path) and len(path) > len(rule.path):
                return rule
        elif path == rule.path:
            return rule
    return None


def resolve_route(role: Optional[str], path: str) -> RouteDecision:
    """
    Decide whether a role may open a dashboard page.

    Args:
        role: The member's role, or None when not signed in
        path: The page path (e.g. "/employees", "/client/c1")
    """
    path = _normalize_path(path)

    if path == "/":
        return RouteDecision(allowed=False, redirect_to=LOGIN_PATH, reason="root")

    if path in PUBLIC_PATHS:
        return RouteDecision(allowed=True)

    rule = _match_route(path)
    if rule is None:
        return RouteDecision(allowed=False, reason="not_found")

    if role is None:
        return RouteDecision(allowed=False, redirect_to=LOGIN_PATH, reason="unauthenticated")

    if rule.employee_redirect and role == "employee":
        return RouteDecision(allowed=False, redirect_to=EMPLOYEE_HOME, reason="employee_redirect")

    if role not in rule.allowed_roles:
        return RouteDecision(allowed=False, redirect_to=UNAUTHORIZED_PATH, reason="forbidden")

    return RouteDecision(allowed=True)


@dataclass(frozen=True)
class NavItem:
    label: str
    href: str


def navigation_items(role: Optional[str]) -> list[NavItem]:
    """Sidebar entries for a role."""
    if role in ("employee", "teamlead"):
        return [
            NavItem("Time Tracking", "/time-tracking"),
            NavItem("My Profile", "/employee-profile"),
        ]

    items = [
        NavItem("Dashboard", "/dashboard"),
        NavItem("Projects", "/projects"),
        NavItem("Finance", "/finance"),
        NavItem("Clients", "/clients"),
    ]

    if role in ("admin", "manager"):
        items.append(NavItem("Employees", "/employees"))
        items.append(NavItem("Reports", "/reports"))

    if role == "admin":
        items.append(NavItem("Settings", "/settings"))

    return items


# --- FastAPI dependencies ---

def _forbidden(details: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail={"error": "forbidden", "details": details}
    )


def require_roles(*roles: str) -> Callable[..., Coroutine[Any, Any, CurrentMember]]:
    """
    Dependency factory allowing only the given roles.

    Usage:
        @router.get("/settings/users")
        async def list_users(
            member: Annotated[CurrentMember, Depends(require_roles("admin"))]
        ): ...
    """
    async def dependency(
        member: Annotated[CurrentMember, Depends(get_current_member)]
    ) -> CurrentMember:
        if member.role not in roles:
            logger.warning(f"Role '{member.role}' denied (requires one of {roles}) for user_id={member.user_id}")
            raise _forbidden(f"This action requires one of the roles: {', '.join(roles)}")
        return member

    return dependency


def require_permission(section: Section, action: Action) -> Callable[..., Coroutine[Any, Any, CurrentMember]]:
    """Dependency factory gating on the PERMISSIONS matrix."""
    async def dependency(
        member: Annotated[CurrentMember, Depends(get_current_member)]
    ) -> CurrentMember:
        if not has_permission(member.role, section, action):
            logger.warning(f"Role '{member.role}' denied {action} on {section} for user_id={member.user_id}")
            raise _forbidden(f"Role '{member.role}' cannot {action} {section}")
        return member

    return dependency
