"""
Project API endpoints.

Endpoints:
- GET /projects - List projects (search, category, status filters)
- POST /projects - Create a project
- PATCH /projects/{project_id} - Update a project
- POST /projects/assign - Assign an employee to a project
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from postgrest.exceptions import APIError

from command_centre.auth.access import require_permission
from command_centre.auth.dependencies import CurrentMember
from command_centre.db.client import get_supabase_client
from command_centre.schemas.projects import (
    AssignProjectRequest,
    AssignProjectResponse,
    ProjectCreateRequest,
    ProjectCreateResponse,
    ProjectListResponse,
    ProjectResponse,
    ProjectUpdateRequest,
    ProjectUpdateResponse,
)
from command_centre.services.project_service import (
    assign_project,
    create_project,
    get_all_projects,
    update_project,
)
from command_centre.utils.constants import Department, ProjectStatus
from command_centre.utils.errors import failure_details

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/projects", tags=["projects"])


@router.get(
    "",
    response_model=ProjectListResponse,
    status_code=status.HTTP_200_OK,
    summary="List projects",
    description="""
    Retrieve projects, newest first.

    This endpoint:
    - Filters by category and status
    - Searches project and client names
    - Adds the display label for each status

    Security:
    - Requires projects:view
    """
)
async def list_projects(
    member: Annotated[CurrentMember, Depends(require_permission("projects", "view"))],
    search: Optional[str] = Query(None, description="Match on project or client name"),
    category: Optional[Department] = Query(None, description="Filter by category"),
    project_status: Optional[ProjectStatus] = Query(None, alias="status", description="Filter by status"),
) -> ProjectListResponse:
    """
    List projects.

    **6-STEP ENDPOINT FLOW:**

    Step 1: Auth
    - require_permission("projects", "view")

    Step 2: Parse/Validate Request
    - Query parameters: search, category, status

    Step 3: Domain & Intent Filter
    - Simple list request with optional filters

    Step 4: Call Service
    - get_all_projects()

    Step 5: Map Output -> ResponseModel
    - ProjectListResponse

    Step 6: Persistence
    - Read-only operation
    """
    logger.info(
        f"Listing projects for {member.user_id} "
        f"(search={search}, category={category}, status={project_status})"
    )

    supabase_client = get_supabase_client(member.access_token)

    try:
        projects = await get_all_projects(
            supabase_client,
            search=search,
            category=category,
            status=project_status,
        )
        responses = [ProjectResponse.model_validate(p) for p in projects]
        return ProjectListResponse(projects=responses, count=len(responses))

    except Exception as e:
        logger.error(f"Failed to fetch projects: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "fetch_error", "details": failure_details("Failed to retrieve projects from database", e)}
        )


@router.post(
    "",
    response_model=ProjectCreateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a project",
)
async def create_new_project(
    request: ProjectCreateRequest,
    member: Annotated[CurrentMember, Depends(require_permission("projects", "create"))],
) -> ProjectCreateResponse:
    """
    Create a project.

    **6-STEP ENDPOINT FLOW:**

    Step 1: Auth
    - require_permission("projects", "create")

    Step 2: Parse/Validate Request
    - ProjectCreateRequest (dates ordered, enums)

    Step 3: Domain & Intent Filter
    - Client name becomes the description when none is given

    Step 4: Call Service
    - create_project()

    Step 5: Map Output -> ResponseModel
    - ProjectCreateResponse

    Step 6: Persistence
    - projects insert under RLS
    """
    logger.info(f"Creating project '{request.name}' for {member.user_id}")

    supabase_client = get_supabase_client(member.access_token)

    try:
        created = await create_project(supabase_client, **request.model_dump())
        return ProjectCreateResponse(
            project=ProjectResponse.model_validate(created),
            message="Project created successfully"
        )

    except Exception as e:
        logger.error(f"Failed to create project: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "create_error", "details": failure_details("Failed to create project", e)}
        )


@router.post(
    "/assign",
    response_model=AssignProjectResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Assign an employee to a project",
)
async def assign_employee_to_project(
    request: AssignProjectRequest,
    member: Annotated[CurrentMember, Depends(require_permission("projects", "edit"))],
) -> AssignProjectResponse:
    logger.info(f"{member.user_id} is assigning {request.employee_id} to project {request.project_id}")

    supabase_client = get_supabase_client(member.access_token)

    try:
        assignment = await assign_project(
            supabase_client,
            employee_id=request.employee_id,
            project_id=request.project_id,
            role_in_project=request.role_in_project,
        )
        return AssignProjectResponse(employee_project=assignment)

    except APIError as e:
        if e.code == "23505":  # unique_violation
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail={"error": "already_assigned", "details": "Employee is already assigned to this project"}
            )
        logger.error(f"Database error assigning project: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "create_error", "details": failure_details("Failed to assign project", e)}
        )
    except Exception as e:
        logger.error(f"Failed to assign project: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "create_error", "details": failure_details("Failed to assign project", e)}
        )


@router.patch(
    "/{project_id}",
    response_model=ProjectUpdateResponse,
    status_code=status.HTTP_200_OK,
    summary="Update a project",
)
async def update_existing_project(
    project_id: Annotated[str, Path(..., description="Project UUID")],
    request: ProjectUpdateRequest,
    member: Annotated[CurrentMember, Depends(require_permission("projects", "edit"))],
) -> ProjectUpdateResponse:
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
        updated = await update_project(supabase_client, project_id, **updates)
    except Exception as e:
        logger.error(f"Failed to update project {project_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "update_error", "details": failure_details("Failed to update project", e)}
        )

    if not updated:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": "not_found", "details": f"Project {project_id} not found"}
        )

    return ProjectUpdateResponse(
        project=ProjectResponse.model_validate(updated),
        message="Project updated successfully"
    )
