"""
Employee management API endpoints.

Endpoints:
- GET /employees - List employees (department and search filters)
- POST /employees - Add an employee (auth user + profile + employee row)
- GET /employees/me - The caller's own record
- PUT /employees/me/skills - Replace the caller's skills
- POST /employees/skills - Assign one skill to an employee
- GET /employees/{employee_id} - Get one employee
- PATCH /employees/{employee_id} - Edit an employee
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from postgrest.exceptions import APIError
from supabase import AuthApiError

from command_centre.auth.access import require_permission
from command_centre.auth.dependencies import CurrentMember, get_current_member
from command_centre.db.client import get_service_role_client, get_supabase_client
from command_centre.schemas.employees import (
    AssignSkillRequest,
    AssignSkillResponse,
    EmployeeCreateRequest,
    EmployeeCreateResponse,
    EmployeeListResponse,
    EmployeeResponse,
    EmployeeUpdateRequest,
    EmployeeUpdateResponse,
    SkillsReplaceRequest,
    SkillsReplaceResponse,
)
from command_centre.services.employee_service import (
    assign_skill,
    create_employee,
    get_all_employees,
    get_employee_by_id,
    replace_employee_skills,
    update_employee,
)
from command_centre.utils.constants import Department
from command_centre.utils.errors import error_message, failure_details
from command_centre.utils.formatting import split_csv

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/employees", tags=["employees"])


def _not_found(employee_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail={"error": "not_found", "details": f"Employee {employee_id} not found"}
    )


@router.get(
    "",
    response_model=EmployeeListResponse,
    status_code=status.HTTP_200_OK,
    summary="List employees",
    description="""
    Retrieve employees joined with their profile, skills and project
    assignments, flattened into one record each.

    Security:
    - Requires employees:view
    """
)
async def list_employees(
    member: Annotated[CurrentMember, Depends(require_permission("employees", "view"))],
    department: Optional[Department] = Query(None, description="Filter by department"),
    search: Optional[str] = Query(None, description="Match on name, email, job role or skill"),
) -> EmployeeListResponse:
    """
    List employees.

    **6-STEP ENDPOINT FLOW:**

    Step 1: Auth
    - require_permission("employees", "view")

    Step 2: Parse/Validate Request
    - Query parameters: department, search

    Step 3: Domain & Intent Filter
    - Simple list request with optional filters

    Step 4: Call Service
    - get_all_employees()

    Step 5: Map Output -> ResponseModel
    - EmployeeListResponse

    Step 6: Persistence
    - Read-only operation
    """
    logger.info(f"Listing employees for {member.user_id} (department={department}, search={search})")

    supabase_client = get_supabase_client(member.access_token)

    try:
        employees = await get_all_employees(supabase_client, department=department, search=search)
        responses = [EmployeeResponse.model_validate(e) for e in employees]
        return EmployeeListResponse(employees=responses, count=len(responses))

    except Exception as e:
        logger.error(f"Failed to fetch employees: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "fetch_error", "details": failure_details("Failed to retrieve employees from database", e)}
        )


@router.post(
    "",
    response_model=EmployeeCreateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add an employee",
    description="""
    Create a login for a new employee and their HR record.

    This endpoint:
    - Creates a confirmed Supabase Auth user (admin API)
    - Inserts the profile (dashboard role) and the employee row with the same id

    Security:
    - Requires employees:create
    - Runs with the service-role client
    """
)
async def create_new_employee(
    request: EmployeeCreateRequest,
    member: Annotated[CurrentMember, Depends(require_permission("employees", "create"))],
) -> EmployeeCreateResponse:
    """
    Add an employee.

    **6-STEP ENDPOINT FLOW:**

    Step 1: Auth
    - require_permission("employees", "create")

    Step 2: Parse/Validate Request
    - EmployeeCreateRequest (strong password, enums, ranges)

    Step 3: Domain & Intent Filter
    - Defaults applied by the schema

    Step 4: Call Service
    - create_employee() with the service-role client

    Step 5: Map Output -> ResponseModel
    - EmployeeCreateResponse

    Step 6: Persistence
    - auth user, profiles and employees inserts
    """
    logger.info(f"{member.user_id} is adding employee {request.email} (role={request.role})")

    try:
        admin_client = get_service_role_client()
        created = await create_employee(admin_client, **request.model_dump())

        return EmployeeCreateResponse(
            user_id=created["user_id"],
            profile=created["profile"],
            employee=created["employee"],
            message="Employee added successfully"
        )

    except AuthApiError as e:
        logger.warning(f"Auth user creation rejected for {request.email}: {e}")
        if "already" in str(e).lower():
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail={"error": "employee_exists", "details": "A user with this email already exists"}
            )
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "invalid_request", "details": error_message(e)}
        )
    except APIError as e:
        if e.code == "23505":  # unique_violation
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail={"error": "employee_exists", "details": "Employee record already exists"}
            )
        logger.error(f"Database error adding employee {request.email}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "create_error", "details": failure_details("Failed to add employee", e)}
        )
    except Exception as e:
        logger.error(f"Failed to add employee {request.email}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "create_error", "details": failure_details("Failed to add employee", e)}
        )


@router.get(
    "/me",
    response_model=EmployeeResponse,
    status_code=status.HTTP_200_OK,
    summary="Get my employee record",
)
async def get_my_record(
    member: Annotated[CurrentMember, Depends(get_current_member)],
) -> EmployeeResponse:
    """The caller's own record (My Profile page). Any authenticated member."""
    supabase_client = get_supabase_client(member.access_token)

    try:
        employee = await get_employee_by_id(supabase_client, member.user_id)
    except Exception as e:
        logger.error(f"Failed to fetch employee {member.user_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "fetch_error", "details": failure_details("Failed to retrieve employee", e)}
        )

    if not employee:
        raise _not_found(member.user_id)

    return EmployeeResponse.model_validate(employee)


@router.put(
    "/me/skills",
    response_model=SkillsReplaceResponse,
    status_code=status.HTTP_200_OK,
    summary="Replace my skills",
)
async def replace_my_skills(
    request: SkillsReplaceRequest,
    member: Annotated[CurrentMember, Depends(get_current_member)],
) -> SkillsReplaceResponse:
    supabase_client = get_supabase_client(member.access_token)

    try:
        skills = await replace_employee_skills(supabase_client, member.user_id, request.skills)
    except Exception as e:
        logger.error(f"Failed to replace skills for {member.user_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "update_error", "details": failure_details("Failed to update skills", e)}
        )

    return SkillsReplaceResponse(skills=skills, message="Skills updated successfully")


@router.post(
    "/skills",
    response_model=AssignSkillResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Assign a skill to an employee",
)
async def assign_employee_skill(
    request: AssignSkillRequest,
    member: Annotated[CurrentMember, Depends(require_permission("employees", "edit"))],
) -> AssignSkillResponse:
    supabase_client = get_supabase_client(member.access_token)

    try:
        link = await assign_skill(
            supabase_client,
            employee_id=request.employee_id,
            skill_id=request.skill_id,
            proficiency_level=request.proficiency_level,
        )
        return AssignSkillResponse(employee_skill=link)

    except APIError as e:
        if e.code == "23505":  # unique_violation
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail={"error": "skill_exists", "details": "Employee already has this skill"}
            )
        logger.error(f"Database error assigning skill: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "create_error", "details": failure_details("Failed to assign skill", e)}
        )
    except Exception as e:
        logger.error(f"Failed to assign skill: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "create_error", "details": failure_details("Failed to assign skill", e)}
        )


@router.get(
    "/{employee_id}",
    response_model=EmployeeResponse,
    status_code=status.HTTP_200_OK,
    summary="Get an employee",
)
async def get_employee(
    employee_id: Annotated[str, Path(..., description="Employee UUID")],
    member: Annotated[CurrentMember, Depends(get_current_member)],
) -> EmployeeResponse:
    """
    Any member may read their own record; other records need employees:view.
    """
    if employee_id != member.user_id:
        await require_permission("employees", "view")(member)

    supabase_client = get_supabase_client(member.access_token)

    try:
        employee = await get_employee_by_id(supabase_client, employee_id)
    except Exception as e:
        logger.error(f"Failed to fetch employee {employee_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "fetch_error", "details": failure_details("Failed to retrieve employee", e)}
        )

    if not employee:
        raise _not_found(employee_id)

    return EmployeeResponse.model_validate(employee)


@router.patch(
    "/{employee_id}",
    response_model=EmployeeUpdateResponse,
    status_code=status.HTTP_200_OK,
    summary="Edit an employee",
)
async def update_existing_employee(
    employee_id: Annotated[str, Path(..., description="Employee UUID")],
    request: EmployeeUpdateRequest,
    member: Annotated[CurrentMember, Depends(require_permission("employees", "edit"))],
) -> EmployeeUpdateResponse:
    """
    Edit an employee.

    **6-STEP ENDPOINT FLOW:**

    Step 1: Auth
    - require_permission("employees", "edit")

    Step 2: Parse/Validate Request
    - EmployeeUpdateRequest; at least one field

    Step 3: Domain & Intent Filter
    - Split the comma-separated skills value

    Step 4: Call Service
    - update_employee() routes fields to profiles / employees / skills

    Step 5: Map Output -> ResponseModel
    - EmployeeUpdateResponse, 404 if missing

    Step 6: Persistence
    - profiles and employees updates, employee_skills replacement
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

    skills_text = updates.pop("skills", None)
    skills = split_csv(skills_text) if skills_text is not None else None

    logger.info(f"{member.user_id} is updating employee {employee_id}")

    supabase_client = get_supabase_client(member.access_token)

    try:
        updated = await update_employee(supabase_client, employee_id, skills=skills, **updates)
    except Exception as e:
        logger.error(f"Failed to update employee {employee_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "update_error", "details": failure_details("Failed to update employee", e)}
        )

    if not updated:
        raise _not_found(employee_id)

    return EmployeeUpdateResponse(
        employee=EmployeeResponse.model_validate(updated),
        message="Employee updated successfully"
    )
