"""
User and role management for the admin Settings page.
"""

import logging
from typing import Any, Dict, List, Optional, cast

from supabase import Client

from command_centre.auth.access import PERMISSIONS, ROLE_NAMES, ROLES
from command_centre.utils.formatting import initials

logger = logging.getLogger(__name__)


def list_roles() -> List[Dict[str, Any]]:
    """The permission matrix, one entry per role in display order."""
    return [
        {"id": role, "name": ROLE_NAMES[role], "permissions": PERMISSIONS[role]}
        for role in ROLES
    ]


def to_settings_user(row: Dict[str, Any]) -> Dict[str, Any]:
    name = str(row.get("name") or row.get("email") or "")
    role = str(row.get("role") or "employee")
    last_active = row.get("last_active") or row.get("updated_at")
    return {
        "id": str(row.get("id")),
        "name": name,
        "email": str(row.get("email") or ""),
        "role": role,
        "role_name": ROLE_NAMES.get(role, role),
        "avatar": initials(name)[:2],
        "last_active": str(last_active) if last_active else None,
    }


async def get_users(supabase_client: Client) -> List[Dict[str, Any]]:
    result = supabase_client.table("profiles").select("*").order("name").execute()
    users = [to_settings_user(row) for row in cast(List[Dict[str, Any]], result.data or [])]
    logger.info(f"Fetched {len(users)} users for settings")
    return users


async def update_user_role(
    supabase_client: Client,
    user_id: str,
    role: str
) -> Optional[Dict[str, Any]]:
    """Change a member's role. Returns None if the profile does not exist."""
    logger.info(f"Changing role of {user_id} to {role}")

    result = (
        supabase_client.table("profiles")
        .update({"role": role})
        .eq("id", user_id)
        .execute()
    )

    if not result.data:
        logger.warning(f"Profile {user_id} not found for role update")
        return None

    return to_settings_user(cast(Dict[str, Any], result.data[0]))
