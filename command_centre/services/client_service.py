"""
Client persistence service.

Tables:
- clients: company record plus billing totals (total_billed, total_paid,
  overdue, active_projects) maintained in the datastore
- client_feedback, client_visits, client_opportunities: child records keyed
  by client_id

RLS is enforced through the caller's Supabase client.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional, cast

from supabase import Client

from command_centre.utils.formatting import initials, percentage

logger = logging.getLogger(__name__)


def to_client_view(row: Dict[str, Any]) -> Dict[str, Any]:
    """Add the derived display fields the client pages show."""
    total_billed = float(row.get("total_billed") or 0)
    total_paid = float(row.get("total_paid") or 0)
    name = str(row.get("name") or "")
    return {
        **row,
        "id": str(row.get("id")),
        "logo_initials": initials(name)[:2] or "?",
        "total_billed": total_billed,
        "total_paid": total_paid,
        "overdue": float(row.get("overdue") or 0),
        "active_projects": int(row.get("active_projects") or 0),
        "payment_progress": percentage(total_paid, total_billed),
    }


def matches_search(row: Dict[str, Any], search: Optional[str]) -> bool:
    if not search:
        return True
    needle = search.lower()
    return (
        needle in str(row.get("name") or "").lower()
        or needle in str(row.get("contact_person") or "").lower()
    )


async def get_all_clients(
    supabase_client: Client,
    status: Optional[str] = None,
    search: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """
    Fetch clients ordered by name, with derived display fields.

    Args:
        supabase_client: Authenticated Supabase client
        status: Optional filter (active/inactive/prospect)
        search: Optional case-insensitive match on name or contact person
    """
    logger.debug(f"Fetching clients (status={status}, search={search})")

    query = supabase_client.table("clients").select("*")
    if status:
        query = query.eq("status", status)

    result = query.order("name").execute()
    rows = cast(List[Dict[str, Any]], result.data or [])

    clients = [to_client_view(row) for row in rows if matches_search(row, search)]
    logger.info(f"Fetched {len(clients)} clients")
    return clients


async def get_client_by_id(
    supabase_client: Client,
    client_id: str
) -> Optional[Dict[str, Any]]:
    result = (
        supabase_client.table("clients")
        .select("*")
        .eq("id", client_id)
        .execute()
    )

    if not result.data:
        logger.warning(f"Client {client_id} not found")
        return None

    return to_client_view(cast(Dict[str, Any], result.data[0]))


async def create_client(
    supabase_client: Client,
    name: str,
    contact_person: str,
    email: str,
    phone: str,
    address: str,
    status: str = "prospect",
) -> Dict[str, Any]:
    """
    Insert a client.

    Raises:
        Exception: If the datastore returns no row
    """
    client_data = {
        "name": name,
        "contact_person": contact_person,
        "email": email,
        "phone": phone,
        "address": address,
        "status": status,
    }

    logger.info(f"Creating client '{name}' (status={status})")

    result = supabase_client.table("clients").insert(client_data).execute()

    if not result.data:
        raise Exception("Failed to create client: no data returned")

    created = to_client_view(cast(Dict[str, Any], result.data[0]))
    logger.info(f"Client created successfully: {created['id']}")
    return created


async def update_client(
    supabase_client: Client,
    client_id: str,
    **updates: Any
) -> Optional[Dict[str, Any]]:
    """Patch a client. Returns None if it does not exist."""
    logger.info(f"Updating client {client_id}: {list(updates.keys())}")

    result = (
        supabase_client.table("clients")
        .update(updates)
        .eq("id", client_id)
        .execute()
    )

    if not result.data:
        logger.warning(f"Client {client_id} not found for update")
        return None

    return to_client_view(cast(Dict[str, Any], result.data[0]))


# --- Feedback ---

def to_feedback_view(row: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": str(row.get("id")),
        "client_id": str(row.get("client_id")),
        "feedback_date": str(row.get("feedback_date") or ""),
        "project": str(row.get("project") or ""),
        "text": str(row.get("text") or ""),
        "sentiment": row.get("sentiment", "neutral"),
    }


async def get_client_feedback(supabase_client: Client, client_id: str) -> List[Dict[str, Any]]:
    result = (
        supabase_client.table("client_feedback")
        .select("*")
        .eq("client_id", client_id)
        .order("feedback_date", desc=True)
        .execute()
    )
    return [to_feedback_view(row) for row in cast(List[Dict[str, Any]], result.data or [])]


async def add_feedback(
    supabase_client: Client,
    client_id: str,
    project: str,
    text: str,
    sentiment: str,
    feedback_date: Optional[date] = None,
) -> Dict[str, Any]:
    feedback_data = {
        "client_id": client_id,
        "project": project,
        "text": text,
        "sentiment": sentiment,
        "feedback_date": (feedback_date or date.today()).isoformat(),
    }

    logger.info(f"Adding {sentiment} feedback for client {client_id}")

    result = supabase_client.table("client_feedback").insert(feedback_data).execute()
    if not result.data:
        raise Exception("Failed to add feedback: no data returned")

    return to_feedback_view(cast(Dict[str, Any], result.data[0]))


# --- Visits ---

def to_visit_view(row: Dict[str, Any]) -> Dict[str, Any]:
    attendees = row.get("attendees") or []
    return {
        "id": str(row.get("id")),
        "client_id": str(row.get("client_id")),
        "visit_date": str(row.get("visit_date") or ""),
        "purpose": str(row.get("purpose") or ""),
        "attendees": [str(a) for a in attendees],
        "notes": row.get("notes"),
    }


async def get_client_visits(supabase_client: Client, client_id: str) -> List[Dict[str, Any]]:
    result = (
        supabase_client.table("client_visits")
        .select("*")
        .eq("client_id", client_id)
        .order("visit_date", desc=True)
        .execute()
    )
    return [to_visit_view(row) for row in cast(List[Dict[str, Any]], result.data or [])]


async def schedule_visit(
    supabase_client: Client,
    client_id: str,
    purpose: str,
    visit_date: date,
    attendees: List[str],
    notes: Optional[str] = None,
) -> Dict[str, Any]:
    visit_data = {
        "client_id": client_id,
        "purpose": purpose,
        "visit_date": visit_date.isoformat(),
        "attendees": attendees,
        "notes": notes,
    }

    logger.info(f"Scheduling visit for client {client_id} on {visit_date.isoformat()} ({len(attendees)} attendees)")

    result = supabase_client.table("client_visits").insert(visit_data).execute()
    if not result.data:
        raise Exception("Failed to schedule visit: no data returned")

    return to_visit_view(cast(Dict[str, Any], result.data[0]))


# --- Opportunities ---

def to_opportunity_view(row: Dict[str, Any]) -> Dict[str, Any]:
    estimated_value = float(row.get("estimated_value") or 0)
    probability = int(row.get("probability") or 0)
    return {
        "id": str(row.get("id")),
        "client_id": str(row.get("client_id")),
        "title": str(row.get("title") or ""),
        "description": str(row.get("description") or ""),
        "estimated_value": estimated_value,
        "probability": probability,
        "weighted_value": round(estimated_value * probability / 100, 2),
        "next_steps": str(row.get("next_steps") or ""),
    }


async def get_client_opportunities(supabase_client: Client, client_id: str) -> List[Dict[str, Any]]:
    result = (
        supabase_client.table("client_opportunities")
        .select("*")
        .eq("client_id", client_id)
        .order("estimated_value", desc=True)
        .execute()
    )
    return [to_opportunity_view(row) for row in cast(List[Dict[str, Any]], result.data or [])]


async def add_opportunity(
    supabase_client: Client,
    client_id: str,
    title: str,
    description: str,
    estimated_value: float,
    probability: int,
    next_steps: str,
) -> Dict[str, Any]:
    opportunity_data = {
        "client_id": client_id,
        "title": title,
        "description": description,
        "estimated_value": estimated_value,
        "probability": probability,
        "next_steps": next_steps,
    }

    logger.info(f"Adding opportunity '{title}' for client {client_id} (probability={probability}%)")

    result = supabase_client.table("client_opportunities").insert(opportunity_data).execute()
    if not result.data:
        raise Exception("Failed to add opportunity: no data returned")

    return to_opportunity_view(cast(Dict[str, Any], result.data[0]))


async def get_client_profile(
    supabase_client: Client,
    client_id: str
) -> Optional[Dict[str, Any]]:
    """Client plus its feedback, visits and opportunities (None if missing)."""
    client = await get_client_by_id(supabase_client, client_id)
    if not client:
        return None

    return {
        "client": client,
        "feedback": await get_client_feedback(supabase_client, client_id),
        "visits": await get_client_visits(supabase_client, client_id),
        "opportunities": await get_client_opportunities(supabase_client, client_id),
    }
