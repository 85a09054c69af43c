"""
Client management API endpoints.

Endpoints:
- GET /clients - List clients (status and search filters)
- POST /clients - Add a client
- GET /clients/{client_id} - Client profile with feedback, visits, opportunities
- PATCH /clients/{client_id} - Update a client
- GET|POST /clients/{client_id}/feedback
- GET|POST /clients/{client_id}/visits
- GET|POST /clients/{client_id}/opportunities
"""

import logging
from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from supabase import Client

from command_centre.auth.access import require_permission
from command_centre.auth.dependencies import CurrentMember
from command_centre.db.client import get_supabase_client
from command_centre.schemas.clients import (
    ClientCreateRequest,
    ClientCreateResponse,
    ClientListResponse,
    ClientProfileResponse,
    ClientResponse,
    ClientUpdateRequest,
    ClientUpdateResponse,
    FeedbackCreateRequest,
    FeedbackCreateResponse,
    FeedbackResponse,
    OpportunityCreateRequest,
    OpportunityCreateResponse,
    OpportunityResponse,
    VisitCreateRequest,
    VisitCreateResponse,
    VisitResponse,
)
from command_centre.services.client_service import (
    add_feedback,
    add_opportunity,
    create_client,
    get_all_clients,
    get_client_by_id,
    get_client_feedback,
    get_client_opportunities,
    get_client_profile,
    get_client_visits,
    schedule_visit,
    update_client,
)
from command_centre.utils.constants import ClientStatus
from command_centre.utils.errors import failure_details

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/clients", tags=["clients"])

ClientViewer = Annotated[CurrentMember, Depends(require_permission("clients", "view"))]
ClientCreator = Annotated[CurrentMember, Depends(require_permission("clients", "create"))]
ClientEditor = Annotated[CurrentMember, Depends(require_permission("clients", "edit"))]
ClientId = Annotated[str, Path(..., description="Client UUID")]


def _not_found(client_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail={"error": "not_found", "details": f"Client {client_id} not found"}
    )


def _server_error(error: str, details: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"error": error, "details": details}
    )


@router.get(
    "",
    response_model=ClientListResponse,
    status_code=status.HTTP_200_OK,
    summary="List clients",
    description="""
    Retrieve all clients with their billing totals.

    This endpoint:
    - Adds logo initials and payment progress (paid / billed)
    - Supports filtering by status and a name/contact search
    - Ordered by client name

    Security:
    - Requires clients:view
    """
)
async def list_clients(
    member: ClientViewer,
    client_status: Optional[ClientStatus] = Query(None, alias="status", description="active|inactive|prospect"),
    search: Optional[str] = Query(None, description="Match on name or contact person"),
) -> ClientListResponse:
    """
    List clients.

    **6-STEP ENDPOINT FLOW:**

    Step 1: Auth
    - require_permission("clients", "view")

    Step 2: Parse/Validate Request
    - Query parameters: status, search

    Step 3: Domain & Intent Filter
    - Simple list request with optional filters

    Step 4: Call Service
    - get_all_clients()

    Step 5: Map Output -> ResponseModel
    - ClientListResponse

    Step 6: Persistence
    - Read-only operation
    """
    logger.info(f"Listing clients for {member.user_id} (status={client_status}, search={search})")

    supabase_client = get_supabase_client(member.access_token)

    try:
        clients = await get_all_clients(supabase_client, status=client_status, search=search)
        responses = [ClientResponse.model_validate(c) for c in clients]
        return ClientListResponse(clients=responses, count=len(responses))

    except Exception as e:
        logger.error(f"Failed to fetch clients: {e}", exc_info=True)
        raise _server_error("fetch_error", failure_details("Failed to retrieve clients from database", e))


@router.post(
    "",
    response_model=ClientCreateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a client",
)
async def create_new_client(
    request: ClientCreateRequest,
    member: ClientCreator,
) -> ClientCreateResponse:
    """
    Add a client.

    **6-STEP ENDPOINT FLOW:**

    Step 1: Auth
    - require_permission("clients", "create")

    Step 2: Parse/Validate Request
    - ClientCreateRequest (name, contact, email, phone, address, status)

    Step 3: Domain & Intent Filter
    - Form rules enforced by the schema

    Step 4: Call Service
    - create_client()

    Step 5: Map Output -> ResponseModel
    - ClientCreateResponse

    Step 6: Persistence
    - clients insert under RLS
    """
    logger.info(f"Creating client '{request.name}' for {member.user_id}")

    supabase_client = get_supabase_client(member.access_token)

    try:
        created = await create_client(supabase_client, **request.model_dump())
        return ClientCreateResponse(
            client=ClientResponse.model_validate(created),
            message="Client added successfully"
        )

    except Exception as e:
        logger.error(f"Failed to create client: {e}", exc_info=True)
        raise _server_error("create_error", failure_details("Failed to create client", e))


@router.get(
    "/{client_id}",
    response_model=ClientProfileResponse,
    status_code=status.HTTP_200_OK,
    summary="Get client profile",
)
async def get_client(client_id: ClientId, member: ClientViewer) -> ClientProfileResponse:
    """Client record plus feedback, visits and opportunities."""
    supabase_client = get_supabase_client(member.access_token)

    try:
        profile = await get_client_profile(supabase_client, client_id)
    except Exception as e:
        logger.error(f"Failed to fetch client {client_id}: {e}", exc_info=True)
        raise _server_error("fetch_error", failure_details("Failed to retrieve client", e))

    if not profile:
        raise _not_found(client_id)

    return ClientProfileResponse.model_validate(profile)


@router.patch(
    "/{client_id}",
    response_model=ClientUpdateResponse,
    status_code=status.HTTP_200_OK,
    summary="Update a client",
)
async def update_existing_client(
    client_id: ClientId,
    request: ClientUpdateRequest,
    member: ClientEditor,
) -> ClientUpdateResponse:
    """
    Patch a client.

    **6-STEP ENDPOINT FLOW:**

    Step 1: Auth
    - require_permission("clients", "edit")

    Step 2: Parse/Validate Request
    - ClientUpdateRequest; at least one field

    Step 3: Domain & Intent Filter
    - 400 when the body carries no fields

    Step 4: Call Service
    - update_client()

    Step 5: Map Output -> ResponseModel
    - ClientUpdateResponse, 404 if missing

    Step 6: Persistence
    - clients update under RLS
    """
    updates = request.model_dump(exclude_none=True)

    if not updates:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": "invalid_request",
                "details": "At least one field must be provided for update"
            }
        )

    supabase_client = get_supabase_client(member.access_token)

    try:
        updated = await update_client(supabase_client, client_id, **updates)
    except Exception as e:
        logger.error(f"Failed to update client {client_id}: {e}", exc_info=True)
        raise _server_error("update_error", failure_details("Failed to update client", e))

    if not updated:
        raise _not_found(client_id)

    return ClientUpdateResponse(
        client=ClientResponse.model_validate(updated),
        message="Client updated successfully"
    )


async def _require_client(supabase_client: Client, client_id: str) -> None:
    try:
        existing = await get_client_by_id(supabase_client, client_id)
    except Exception as e:
        logger.error(f"Failed to fetch client {client_id}: {e}", exc_info=True)
        raise _server_error("fetch_error", failure_details("Failed to retrieve client", e))
    if not existing:
        raise _not_found(client_id)


# --- Feedback ---

@router.get("/{client_id}/feedback", response_model=List[FeedbackResponse], summary="List client feedback")
async def list_feedback(client_id: ClientId, member: ClientViewer) -> List[FeedbackResponse]:
    supabase_client = get_supabase_client(member.access_token)
    try:
        rows = await get_client_feedback(supabase_client, client_id)
    except Exception as e:
        logger.error(f"Failed to fetch feedback for {client_id}: {e}", exc_info=True)
        raise _server_error("fetch_error", failure_details("Failed to retrieve feedback", e))
    return [FeedbackResponse.model_validate(r) for r in rows]


@router.post(
    "/{client_id}/feedback",
    response_model=FeedbackCreateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add client feedback",
)
async def create_feedback(
    client_id: ClientId,
    request: FeedbackCreateRequest,
    member: ClientCreator,
) -> FeedbackCreateResponse:
    supabase_client = get_supabase_client(member.access_token)
    await _require_client(supabase_client, client_id)

    try:
        feedback = await add_feedback(supabase_client, client_id, **request.model_dump())
    except Exception as e:
        logger.error(f"Failed to add feedback for {client_id}: {e}", exc_info=True)
        raise _server_error("create_error", failure_details("Failed to add feedback", e))

    return FeedbackCreateResponse(
        feedback=FeedbackResponse.model_validate(feedback),
        message="Feedback added successfully"
    )


# --- Visits ---

@router.get("/{client_id}/visits", response_model=List[VisitResponse], summary="List client visits")
async def list_visits(client_id: ClientId, member: ClientViewer) -> List[VisitResponse]:
    supabase_client = get_supabase_client(member.access_token)
    try:
        rows = await get_client_visits(supabase_client, client_id)
    except Exception as e:
        logger.error(f"Failed to fetch visits for {client_id}: {e}", exc_info=True)
        raise _server_error("fetch_error", failure_details("Failed to retrieve visits", e))
    return [VisitResponse.model_validate(r) for r in rows]


@router.post(
    "/{client_id}/visits",
    response_model=VisitCreateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Schedule a client visit",
)
async def create_visit(
    client_id: ClientId,
    request: VisitCreateRequest,
    member: ClientCreator,
) -> VisitCreateResponse:
    supabase_client = get_supabase_client(member.access_token)
    await _require_client(supabase_client, client_id)

    try:
        visit = await schedule_visit(
            supabase_client,
            client_id,
            purpose=request.purpose,
            visit_date=request.visit_date,
            attendees=request.attendee_list(),
            notes=request.notes,
        )
    except Exception as e:
        logger.error(f"Failed to schedule visit for {client_id}: {e}", exc_info=True)
        raise _server_error("create_error", failure_details("Failed to schedule visit", e))

    return VisitCreateResponse(
        visit=VisitResponse.model_validate(visit),
        message="Visit scheduled successfully"
    )


# --- Opportunities ---

@router.get(
    "/{client_id}/opportunities",
    response_model=List[OpportunityResponse],
    summary="List client opportunities",
)
async def list_opportunities(client_id: ClientId, member: ClientViewer) -> List[OpportunityResponse]:
    supabase_client = get_supabase_client(member.access_token)
    try:
        rows = await get_client_opportunities(supabase_client, client_id)
    except Exception as e:
        logger.error(f"Failed to fetch opportunities for {client_id}: {e}", exc_info=True)
        raise _server_error("fetch_error", failure_details("Failed to retrieve opportunities", e))
    return [OpportunityResponse.model_validate(r) for r in rows]


@router.post(
    "/{client_id}/opportunities",
    response_model=OpportunityCreateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a sales opportunity",
)
async def create_opportunity(
    client_id: ClientId,
    request: OpportunityCreateRequest,
    member: ClientCreator,
) -> OpportunityCreateResponse:
    supabase_client = get_supabase_client(member.access_token)
    await _require_client(supabase_client, client_id)

    try:
        opportunity = await add_opportunity(supabase_client, client_id, **request.model_dump())
    except Exception as e:
        logger.error(f"Failed to add opportunity for {client_id}: {e}", exc_info=True)
        raise _server_error("create_error", failure_details("Failed to add opportunity", e))

    return OpportunityCreateResponse(
        opportunity=OpportunityResponse.model_validate(opportunity),
        message="Opportunity added successfully"
    )
