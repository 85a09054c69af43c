"""
Employee service.

An employee spans two rows that share the auth user's UUID:
- profiles: name, email, phone, role
- employees: department, job_role, joining_date, experience, ctc,
  utilization, avatar

Skills live in `skills` and are linked through `employee_skills`; project
assignments go through `employee_projects`.
"""

import logging
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, cast

from supabase import Client

from command_centre.utils.formatting import initials

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("name", "email", "phone")
EMPLOYMENT_FIELDS = ("department", "job_role", "joining_date", "experience", "ctc")

EMPLOYEE_SELECT = (
    "*, "
    "profiles:id(name, email, phone, role), "
    "employee_skills(skills(name)), "
    "employee_projects(projects(name))"
)


def _nested_names(links: Optional[Iterable[Dict[str, Any]]], key: str) -> List[str]:
    names: List[str] = []
    for link in links or []:
        target = link.get(key) or {}
        name = target.get("name") if isinstance(target, dict) else None
        if name:
            names.append(str(name))
    return names


def flatten_employee(row: Dict[str, Any]) -> Dict[str, Any]:
    """
    Flatten an employees row (with embedded profile, skills and projects)
    into the Employee view.
    """
    profile = row.get("profiles") or {}
    if isinstance(profile, list):
        profile = profile[0] if profile else {}

    name = str(profile.get("name") or "")
    joining_date = row.get("joining_date")

    return {
        "id": str(row.get("id")),
        "name": name,
        "email": str(profile.get("email") or ""),
        "phone": profile.get("phone"),
        "department": str(row.get("department") or ""),
        "role": str(row.get("job_role") or ""),
        "access_role": str(profile.get("role") or "employee"),
        "joining_date": str(joining_date) if joining_date else None,
        "experience": float(row.get("experience") or 0),
        "skills": _nested_names(row.get("employee_skills"), "skills"),
        "utilization": float(row.get("utilization") or 0),
        "ctc": float(row["ctc"]) if row.get("ctc") is not None else None,
        "projects": _nested_names(row.get("employee_projects"), "projects"),
        "avatar": str(row.get("avatar") or initials(name)),
    }


def matches_filters(
    employee: Dict[str, Any],
    department: Optional[str],
    search: Optional[str]
) -> bool:
    if department and employee["department"] != department:
        return False
    if search:
        needle = search.lower()
        haystack = [employee["name"], employee["email"], employee["role"], *employee["skills"]]
        return any(needle in value.lower() for value in haystack)
    return True


async def get_all_employees(
    supabase_client: Client,
    department: Optional[str] = None,
    search: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """
    Fetch all employees as flattened views, ordered by joining date.

    Args:
        supabase_client: Authenticated Supabase client
        department: Optional exact department filter
        search: Optional match on name, email, job role or skill
    """
    logger.debug(f"Fetching employees (department={department}, search={search})")

    result = (
        supabase_client.table("employees")
        .select(EMPLOYEE_SELECT)
        .order("joining_date")
        .execute()
    )
    rows = cast(List[Dict[str, Any]], result.data or [])

    employees = [flatten_employee(row) for row in rows]
    filtered = [e for e in employees if matches_filters(e, department, search)]

    logger.info(f"Fetched {len(filtered)} of {len(employees)} employees")
    return filtered


async def get_employee_by_id(
    supabase_client: Client,
    employee_id: str
) -> Optional[Dict[str, Any]]:
    result = (
        supabase_client.table("employees")
        .select(EMPLOYEE_SELECT)
        .eq("id", employee_id)
        .execute()
    )

    if not result.data:
        logger.warning(f"Employee {employee_id} not found")
        return None

    return flatten_employee(cast(Dict[str, Any], result.data[0]))


async def create_employee(
    admin_client: Client,
    email: str,
    password: str,
    name: str,
    role: str = "employee",
    department: str = "Development",
    job_role: str = "Employee",
    joining_date: Optional[date] = None,
    experience: float = 0,
    avatar: Optional[str] = None,
    ctc: Optional[float] = None,
    utilization: Optional[float] = None,
    phone: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Create the auth user, its profile and its employee row.

    Runs on the service-role client: the auth admin API and the inserts on
    behalf of another user both bypass RLS.

    Returns:
        Dict with user_id, profile and employee rows

    Raises:
        Exception: If any of the three writes returns nothing
    """
    logger.info(f"Creating auth user for {email} (role={role})")

    auth_response = admin_client.auth.admin.create_user({
        "email": email,
        "password": password,
        "email_confirm": True,
    })
    user = getattr(auth_response, "user", None)
    if user is None:
        raise Exception("Failed to create auth user: no user returned")
    user_id = str(user.id)

    profile_data = {
        "id": user_id,
        "email": email,
        "name": name,
        "phone": phone,
        "role": role,
    }
    profile_result = admin_client.table("profiles").insert(profile_data).execute()
    if not profile_result.data:
        raise Exception("Failed to create profile: no data returned")

    employee_data: Dict[str, Any] = {
        "id": user_id,
        "department": department,
        "job_role": job_role,
        "joining_date": (joining_date or date.today()).isoformat(),
        "experience": experience,
        "avatar": avatar or initials(name),
        "ctc": ctc,
        "utilization": utilization if utilization is not None else 0,
    }
    employee_result = admin_client.table("employees").insert(employee_data).execute()
    if not employee_result.data:
        raise Exception("Failed to create employee: no data returned")

    logger.info(f"Employee created successfully: {user_id}")

    return {
        "user_id": user_id,
        "profile": cast(Dict[str, Any], profile_result.data[0]),
        "employee": cast(Dict[str, Any], employee_result.data[0]),
    }


async def resolve_skill_ids(supabase_client: Client, names: List[str]) -> List[str]:
    """
    Map skill names to ids, creating any that do not exist yet.

    Matching is case-insensitive; new skills keep the caller's spelling.
    """
    if not names:
        return []

    result = supabase_client.table("skills").select("id, name").execute()
    existing = {
        str(row.get("name") or "").lower(): str(row.get("id"))
        for row in cast(List[Dict[str, Any]], result.data or [])
    }

    skill_ids: List[str] = []
    for name in names:
        key = name.lower()
        if key not in existing:
            created = supabase_client.table("skills").insert({"name": name}).execute()
            if not created.data:
                raise Exception(f"Failed to create skill '{name}': no data returned")
            existing[key] = str(created.data[0]["id"])
            logger.info(f"Created skill '{name}'")
        if existing[key] not in skill_ids:
            skill_ids.append(existing[key])

    return skill_ids


async def replace_employee_skills(
    supabase_client: Client,
    employee_id: str,
    names: List[str]
) -> List[str]:
    """Replace every skill link of an employee. Returns the skill names kept."""
    skill_ids = await resolve_skill_ids(supabase_client, names)

    logger.info(f"Replacing skills for employee {employee_id} ({len(skill_ids)} skills)")

    supabase_client.table("employee_skills").delete().eq("employee_id", employee_id).execute()

    if skill_ids:
        rows = [{"employee_id": employee_id, "skill_id": skill_id} for skill_id in skill_ids]
        supabase_client.table("employee_skills").insert(rows).execute()

    return names


async def update_employee(
    supabase_client: Client,
    employee_id: str,
    skills: Optional[List[str]] = None,
    **updates: Any
) -> Optional[Dict[str, Any]]:
    """
    Patch an employee.

    Profile fields go to `profiles`; employment fields go to `employees`.
    A new name recomputes the avatar initials.

    Returns:
        The refreshed Employee view, or None if the employee does not exist
    """
    current = await get_employee_by_id(supabase_client, employee_id)
    if not current:
        return None

    profile_updates = {k: v for k, v in updates.items() if k in PROFILE_FIELDS}
    employment_updates = {k: v for k, v in updates.items() if k in EMPLOYMENT_FIELDS}

    if isinstance(employment_updates.get("joining_date"), date):
        employment_updates["joining_date"] = employment_updates["joining_date"].isoformat()
    if "name" in profile_updates:
        employment_updates["avatar"] = initials(profile_updates["name"])

    logger.info(
        f"Updating employee {employee_id}: profile={list(profile_updates.keys())}, "
        f"employment={list(employment_updates.keys())}, skills={skills is not None}"
    )

    if profile_updates:
        supabase_client.table("profiles").update(profile_updates).eq("id", employee_id).execute()
    if employment_updates:
        supabase_client.table("employees").update(employment_updates).eq("id", employee_id).execute()
    if skills is not None:
        await replace_employee_skills(supabase_client, employee_id, skills)

    return await get_employee_by_id(supabase_client, employee_id)


async def assign_skill(
    supabase_client: Client,
    employee_id: str,
    skill_id: str,
    proficiency_level: Optional[int] = None,
) -> Dict[str, Any]:
    skill_data: Dict[str, Any] = {"employee_id": employee_id, "skill_id": skill_id}
    if proficiency_level is not None:
        skill_data["proficiency_level"] = proficiency_level

    logger.info(f"Assigning skill {skill_id} to employee {employee_id}")

    result = supabase_client.table("employee_skills").insert(skill_data).execute()
    if not result.data:
        raise Exception("Failed to assign skill: no data returned")

    return cast(Dict[str, Any], result.data[0])


async def find_employee_by_email(
    admin_client: Client,
    email: str
) -> Optional[Dict[str, Any]]:
    """
    Look up an employee by their profile email (service-role client, used
    before login and first-time setup).

    Only members with an employees row match; a bare profile does not.
    """
    result = (
        admin_client.table("employees")
        .select("id, profiles:id!inner(name, email, role)")
        .eq("profiles.email", email)
        .execute()
    )

    if not result.data:
        return None

    row = cast(Dict[str, Any], result.data[0])
    profile = row.get("profiles") or {}
    if isinstance(profile, list):
        profile = profile[0] if profile else {}

    return {
        "id": row.get("id"),
        "name": profile.get("name"),
        "email": profile.get("email") or email,
        "role": profile.get("role"),
    }
