"""
api.py

REST API layer for the projecthub work-item tracker.

Framework : FastAPI
Auth      : Bearer token.  The token is the acting employee's integer id
            (``Authorization: Bearer 7``), resolved by the
            ``get_current_employee_id`` dependency and handed to the use
            cases as ``acting_employee_id``.  Real session handling is out of
            scope; login only confirms the credentials and returns the id.

Structure
---------
  Routers (all prefixed under /api/v1)
  ├── /employees                         — registration, listings
  ├── /login                             — credential check
  ├── /me/projects                       — projects of the caller
  ├── /projects                          — project CRUD
  │   ├── /{project_id}/members          — membership
  │   ├── /{project_id}/available-employees
  │   └── /{project_id}/sub-projects     — sub-project create / list
  ├── /sub-projects/{id}                 — delete
  │   └── /tasks                         — task create / visible list
  ├── /tasks/{id}                        — get, status, note, delete
  │   └── /sub-tasks                     — sub-task create / list
  └── /sub-tasks/{id}                    — status, delete

Error handling
--------------
  NotFoundError            → 404
  InvalidCredentialsError  → 401
  ValidationError          → 422  { "detail": ..., "input": <submitted fields> }
  ApplicationError         → 422
  ValueError               → 422
  Permission denied        → 303 redirect to the caller's safe listing

Response envelope
-----------------
  Success  : { "data": <payload> }
  Error    : { "detail": "<message>" }
"""

from __future__ import annotations

import dataclasses
from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, FastAPI, Header, HTTPException, Path, status
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import BaseModel, EmailStr, Field

from projecthub import __version__, config
from projecthub.application import (
    # Exceptions
    ApplicationError,
    InvalidCredentialsError,
    NotFoundError,
    ValidationError,
    # Unit of work
    AbstractUnitOfWork,
    # Commands
    AddEmployeeToProjectCommand,
    CreateEmployeeCommand,
    CreateProjectCommand,
    CreateSubProjectCommand,
    CreateSubTaskCommand,
    CreateTaskCommand,
    UpdateProjectCommand,
    # Use cases
    AddEmployeeToProjectUseCase,
    CreateEmployeeUseCase,
    CreateProjectUseCase,
    CreateSubProjectUseCase,
    CreateSubTaskUseCase,
    CreateTaskUseCase,
    DeleteProjectUseCase,
    DeleteSubProjectUseCase,
    DeleteSubTaskUseCase,
    DeleteTaskUseCase,
    GetEmployeeUseCase,
    GetProjectUseCase,
    GetTaskUseCase,
    ListAvailableEmployeesUseCase,
    ListEmployeesUseCase,
    ListProjectMembersUseCase,
    ListTeamMembersUseCase,
    LoginUseCase,
    ShowProjectsByEmployeeUseCase,
    ShowSubProjectsByProjectUseCase,
    ShowSubTasksByTaskUseCase,
    ShowTasksForEmployeeUseCase,
    UpdateProjectUseCase,
    UpdateSubTaskStatusUseCase,
    UpdateTaskNoteUseCase,
    UpdateTaskStatusUseCase,
)
from projecthub.infrastructure import InMemoryUnitOfWork


API_PREFIX = "/api/v1"
PROJECTS_VIEW = f"{API_PREFIX}/me/projects"


# ---------------------------------------------------------------------------
# App bootstrap
# ---------------------------------------------------------------------------

app = FastAPI(
    title="projecthub — Project Management API",
    version=__version__,
    description=(
        "Plan projects, split them into sub-projects, tasks and sub-tasks, "
        "assign work to project members and track its status."
    ),
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Global exception handlers
# ---------------------------------------------------------------------------

@app.exception_handler(NotFoundError)
async def not_found_handler(request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(InvalidCredentialsError)
async def invalid_credentials_handler(request, exc: InvalidCredentialsError):
    return JSONResponse(status_code=401, content={"detail": str(exc)})


@app.exception_handler(ValidationError)
async def validation_error_handler(request, exc: ValidationError):
    return JSONResponse(
        status_code=422,
        content={"detail": str(exc), "input": jsonable_encoder(exc.fields)},
    )


@app.exception_handler(ApplicationError)
async def application_error_handler(request, exc: ApplicationError):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(ValueError)
async def value_error_handler(request, exc: ValueError):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------

def get_uow() -> AbstractUnitOfWork:
    """Returns the in-memory Unit of Work; main.py may override it."""
    return InMemoryUnitOfWork()


def get_current_employee_id(authorization: Optional[str] = Header(default=None)) -> int:
    """Resolve ``Authorization: Bearer <employee id>`` to the acting employee id."""
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip().isdigit():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing or malformed bearer token.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return int(token.strip())


# ---------------------------------------------------------------------------
# Envelope helpers
# ---------------------------------------------------------------------------

def _ok(data: Any) -> Dict:
    """Wrap a DTO or list of DTOs in the standard success envelope."""
    if dataclasses.is_dataclass(data):
        return {"data": dataclasses.asdict(data)}
    if isinstance(data, list):
        return {
            "data": [
                dataclasses.asdict(item) if dataclasses.is_dataclass(item) else item
                for item in data
            ]
        }
    return {"data": data}


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url=url, status_code=status.HTTP_303_SEE_OTHER)


# ===========================================================================
# REQUEST BODY SCHEMAS  (Pydantic v2)
# ===========================================================================

class CreateEmployeeRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1)
    email: EmailStr
    role: Optional[str] = Field(default=None, description="PROJECT_MANAGER or TEAM_MEMBER (display names accepted)")
    skill: Optional[str] = Field(default=None, description="Primary skill tag")
    skills: List[str] = Field(default_factory=list)


class LoginRequest(BaseModel):
    username: str
    password: str


class CreateProjectRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field(default="")
    customer: str = Field(default="", max_length=200)
    start_date: Optional[date] = None
    deadline: Optional[date] = None


class UpdateProjectRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    customer: Optional[str] = None
    start_date: Optional[date] = None
    deadline: Optional[date] = None


class AddMemberRequest(BaseModel):
    employee_id: int = Field(..., ge=1)


class CreateSubProjectRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field(default="")
    start_date: Optional[date] = None
    deadline: Optional[date] = None
    status: str = Field(default="NOT_STARTED")


class CreateTaskRequest(BaseModel):
    assignee_id: int = Field(..., ge=1)
    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field(default="")
    start_date: Optional[date] = None
    deadline: Optional[date] = None
    status: str = Field(default="NOT_STARTED")
    priority: str = Field(default="MEDIUM")
    note: str = Field(default="")


class CreateSubTaskRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field(default="")
    start_date: Optional[date] = None
    deadline: Optional[date] = None
    status: str = Field(default="NOT_STARTED")
    priority: str = Field(default="MEDIUM")
    note: str = Field(default="")


class UpdateStatusRequest(BaseModel):
    status: str = Field(..., description="Machine name (IN_PROGRESS) or display name (In progress)")


class UpdateNoteRequest(BaseModel):
    note: Optional[str] = None


# ===========================================================================
# ROUTERS
# ===========================================================================

api_v1 = APIRouter(prefix=API_PREFIX)


# ---------------------------------------------------------------------------
# Employees
# ---------------------------------------------------------------------------

employee_router = APIRouter(tags=["Employees"])


@employee_router.post(
    "/employees",
    status_code=status.HTTP_201_CREATED,
    summary="Register a new employee",
)
def create_employee(
    body: CreateEmployeeRequest,
    uow: AbstractUnitOfWork = Depends(get_uow),
):
    cmd = CreateEmployeeCommand(
        username=body.username,
        password=body.password,
        email=str(body.email),
        role=body.role,
        skill=body.skill,
        skills=body.skills,
    )
    return _ok(CreateEmployeeUseCase().execute(cmd, uow))


@employee_router.post("/login", summary="Check credentials and return the employee")
def login(
    body: LoginRequest,
    uow: AbstractUnitOfWork = Depends(get_uow),
):
    return _ok(LoginUseCase().execute(body.username, body.password, uow))


@employee_router.get("/employees", summary="List all employees")
def list_employees(uow: AbstractUnitOfWork = Depends(get_uow)):
    return _ok(ListEmployeesUseCase().execute(uow))


@employee_router.get("/employees/team-members", summary="List employees with the team-member role")
def list_team_members(uow: AbstractUnitOfWork = Depends(get_uow)):
    return _ok(ListTeamMembersUseCase().execute(uow))


@employee_router.get("/employees/{employee_id}", summary="Get an employee by ID")
def get_employee(
    employee_id: int = Path(...),
    uow: AbstractUnitOfWork = Depends(get_uow),
):
    return _ok(GetEmployeeUseCase().execute(employee_id, uow))


@employee_router.get("/me/projects", summary="Projects the caller is a member of")
def my_projects(
    current_employee_id: int = Depends(get_current_employee_id),
    uow: AbstractUnitOfWork = Depends(get_uow),
):
    return _ok(ShowProjectsByEmployeeUseCase().execute(current_employee_id, uow))


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------

project_router = APIRouter(prefix="/projects", tags=["Projects"])


@project_router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Create a project",
)
def create_project(
    body: CreateProjectRequest,
    current_employee_id: int = Depends(get_current_employee_id),
    uow: AbstractUnitOfWork = Depends(get_uow),
):
    """The creating manager becomes the first member of the project."""
    cmd = CreateProjectCommand(
        name=body.name,
        description=body.description,
        customer=body.customer,
        start_date=body.start_date,
        deadline=body.deadline,
        acting_employee_id=current_employee_id,
    )
    result = CreateProjectUseCase().execute(cmd, uow)
    if result is None:
        return _redirect(PROJECTS_VIEW)
    return _ok(result)


@project_router.get("/{project_id}", summary="Get a project by ID")
def get_project(
    project_id: int = Path(...),
    uow: AbstractUnitOfWork = Depends(get_uow),
):
    return _ok(GetProjectUseCase().execute(project_id, uow))


@project_router.patch("/{project_id}", summary="Update project fields or schedule")
def update_project(
    body: UpdateProjectRequest,
    project_id: int = Path(...),
    current_employee_id: int = Depends(get_current_employee_id),
    uow: AbstractUnitOfWork = Depends(get_uow),
):
    cmd = UpdateProjectCommand(
        project_id=project_id,
        acting_employee_id=current_employee_id,
        name=body.name,
        description=body.description,
        customer=body.customer,
        start_date=body.start_date,
        deadline=body.deadline,
        # an explicit null unsets the date
        clear_start_date="start_date" in body.model_fields_set and body.start_date is None,
        clear_deadline="deadline" in body.model_fields_set and body.deadline is None,
    )
    result = UpdateProjectUseCase().execute(cmd, uow)
    if result is None:
        return _redirect(PROJECTS_VIEW)
    return _ok(result)


@project_router.delete(
    "/{project_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a project with all its sub-projects, tasks and sub-tasks",
)
def delete_project(
    project_id: int = Path(...),
    current_employee_id: int = Depends(get_current_employee_id),
    uow: AbstractUnitOfWork = Depends(get_uow),
):
    if DeleteProjectUseCase().execute(project_id, uow, acting_employee_id=current_employee_id) is None:
        return _redirect(PROJECTS_VIEW)


@project_router.get("/{project_id}/members", summary="List project members")
def list_members(
    project_id: int = Path(...),
    uow: AbstractUnitOfWork = Depends(get_uow),
):
    return _ok(ListProjectMembersUseCase().execute(project_id, uow))


@project_router.post(
    "/{project_id}/members",
    status_code=status.HTTP_201_CREATED,
    summary="Add an employee to a project",
)
def add_member(
    body: AddMemberRequest,
    project_id: int = Path(...),
    current_employee_id: int = Depends(get_current_employee_id),
    uow: AbstractUnitOfWork = Depends(get_uow),
):
    cmd = AddEmployeeToProjectCommand(
        project_id=project_id,
        employee_id=body.employee_id,
        acting_employee_id=current_employee_id,
    )
    result = AddEmployeeToProjectUseCase().execute(cmd, uow)
    if result is None:
        return _redirect(PROJECTS_VIEW)
    return _ok(result)


@project_router.get(
    "/{project_id}/available-employees",
    summary="Employees that can still be added to the project",
)
def list_available(
    project_id: int = Path(...),
    uow: AbstractUnitOfWork = Depends(get_uow),
):
    return _ok(ListAvailableEmployeesUseCase().execute(project_id, uow))


# ---------------------------------------------------------------------------
# Sub-projects
# ---------------------------------------------------------------------------

sub_project_router = APIRouter(tags=["Sub-projects"])


@sub_project_router.post(
    "/projects/{project_id}/sub-projects",
    status_code=status.HTTP_201_CREATED,
    summary="Add a sub-project to a project",
)
def create_sub_project(
    body: CreateSubProjectRequest,
    project_id: int = Path(...),
    current_employee_id: int = Depends(get_current_employee_id),
    uow: AbstractUnitOfWork = Depends(get_uow),
):
    cmd = CreateSubProjectCommand(
        project_id=project_id,
        name=body.name,
        description=body.description,
        start_date=body.start_date,
        deadline=body.deadline,
        acting_employee_id=current_employee_id,
        status=body.status,
    )
    result = CreateSubProjectUseCase().execute(cmd, uow)
    if result is None:
        return _redirect(f"{API_PREFIX}/projects/{project_id}/sub-projects")
    return _ok(result)


@sub_project_router.get(
    "/projects/{project_id}/sub-projects",
    summary="List the sub-projects of a project",
)
def list_sub_projects(
    project_id: int = Path(...),
    uow: AbstractUnitOfWork = Depends(get_uow),
):
    return _ok(ShowSubProjectsByProjectUseCase().execute(project_id, uow))


@sub_project_router.delete(
    "/sub-projects/{sub_project_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a sub-project with its tasks and sub-tasks",
)
def delete_sub_project(
    sub_project_id: int = Path(...),
    current_employee_id: int = Depends(get_current_employee_id),
    uow: AbstractUnitOfWork = Depends(get_uow),
):
    result = DeleteSubProjectUseCase().execute(
        sub_project_id, uow, acting_employee_id=current_employee_id
    )
    if result is None:
        return _redirect(PROJECTS_VIEW)


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------

task_router = APIRouter(tags=["Tasks"])


def _tasks_view(sub_project_id: int) -> str:
    return f"{API_PREFIX}/sub-projects/{sub_project_id}/tasks"


@task_router.post(
    "/sub-projects/{sub_project_id}/tasks",
    status_code=status.HTTP_201_CREATED,
    summary="Create a task in a sub-project",
)
def create_task(
    body: CreateTaskRequest,
    sub_project_id: int = Path(...),
    current_employee_id: int = Depends(get_current_employee_id),
    uow: AbstractUnitOfWork = Depends(get_uow),
):
    """The assignee must already be a member of the enclosing project."""
    cmd = CreateTaskCommand(
        sub_project_id=sub_project_id,
        assignee_id=body.assignee_id,
        name=body.name,
        description=body.description,
        start_date=body.start_date,
        deadline=body.deadline,
        acting_employee_id=current_employee_id,
        status=body.status,
        priority=body.priority,
        note=body.note,
    )
    result = CreateTaskUseCase().execute(cmd, uow)
    if result is None:
        return _redirect(_tasks_view(sub_project_id))
    return _ok(result)


@task_router.get(
    "/sub-projects/{sub_project_id}/tasks",
    summary="Tasks of a sub-project visible to the caller",
)
def list_tasks(
    sub_project_id: int = Path(...),
    current_employee_id: int = Depends(get_current_employee_id),
    uow: AbstractUnitOfWork = Depends(get_uow),
):
    return _ok(ShowTasksForEmployeeUseCase().execute(current_employee_id, sub_project_id, uow))


@task_router.get("/tasks/{task_id}", summary="Get a task by ID")
def get_task(
    task_id: int = Path(...),
    current_employee_id: int = Depends(get_current_employee_id),
    uow: AbstractUnitOfWork = Depends(get_uow),
):
    result = GetTaskUseCase().execute(task_id, uow, acting_employee_id=current_employee_id)
    if result is None:
        return _redirect(PROJECTS_VIEW)
    return _ok(result)


@task_router.patch("/tasks/{task_id}/status", summary="Change the status of a task")
def update_task_status(
    body: UpdateStatusRequest,
    task_id: int = Path(...),
    current_employee_id: int = Depends(get_current_employee_id),
    uow: AbstractUnitOfWork = Depends(get_uow),
):
    result = UpdateTaskStatusUseCase().execute(
        task_id, body.status, uow, acting_employee_id=current_employee_id
    )
    if result is None:
        return _redirect(PROJECTS_VIEW)
    return _ok(result)


@task_router.patch("/tasks/{task_id}/note", summary="Replace the note of a task")
def update_task_note(
    body: UpdateNoteRequest,
    task_id: int = Path(...),
    current_employee_id: int = Depends(get_current_employee_id),
    uow: AbstractUnitOfWork = Depends(get_uow),
):
    """Only a manager or the task's assignee may edit its note."""
    result = UpdateTaskNoteUseCase().execute(task_id, body.note, current_employee_id, uow)
    if result is None:
        return _redirect(PROJECTS_VIEW)
    return _ok(result)


@task_router.delete(
    "/tasks/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a task with its sub-tasks",
)
def delete_task(
    task_id: int = Path(...),
    current_employee_id: int = Depends(get_current_employee_id),
    uow: AbstractUnitOfWork = Depends(get_uow),
):
    if DeleteTaskUseCase().execute(task_id, uow, acting_employee_id=current_employee_id) is None:
        return _redirect(PROJECTS_VIEW)


# ---------------------------------------------------------------------------
# Sub-tasks
# ---------------------------------------------------------------------------

sub_task_router = APIRouter(tags=["Sub-tasks"])


@sub_task_router.post(
    "/tasks/{task_id}/sub-tasks",
    status_code=status.HTTP_201_CREATED,
    summary="Split a task into a sub-task",
)
def create_sub_task(
    body: CreateSubTaskRequest,
    task_id: int = Path(...),
    current_employee_id: int = Depends(get_current_employee_id),
    uow: AbstractUnitOfWork = Depends(get_uow),
):
    cmd = CreateSubTaskCommand(
        task_id=task_id,
        name=body.name,
        description=body.description,
        start_date=body.start_date,
        deadline=body.deadline,
        acting_employee_id=current_employee_id,
        status=body.status,
        priority=body.priority,
        note=body.note,
    )
    result = CreateSubTaskUseCase().execute(cmd, uow)
    if result is None:
        return _redirect(PROJECTS_VIEW)
    return _ok(result)


@sub_task_router.get("/tasks/{task_id}/sub-tasks", summary="List the sub-tasks of a task")
def list_sub_tasks(
    task_id: int = Path(...),
    current_employee_id: int = Depends(get_current_employee_id),
    uow: AbstractUnitOfWork = Depends(get_uow),
):
    result = ShowSubTasksByTaskUseCase().execute(
        task_id, uow, acting_employee_id=current_employee_id
    )
    if result is None:
        return _redirect(PROJECTS_VIEW)
    return _ok(result)


@sub_task_router.patch("/sub-tasks/{sub_task_id}/status", summary="Change the status of a sub-task")
def update_sub_task_status(
    body: UpdateStatusRequest,
    sub_task_id: int = Path(...),
    current_employee_id: int = Depends(get_current_employee_id),
    uow: AbstractUnitOfWork = Depends(get_uow),
):
    result = UpdateSubTaskStatusUseCase().execute(
        sub_task_id, body.status, uow, acting_employee_id=current_employee_id
    )
    if result is None:
        return _redirect(PROJECTS_VIEW)
    return _ok(result)


@sub_task_router.delete(
    "/sub-tasks/{sub_task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a sub-task",
)
def delete_sub_task(
    sub_task_id: int = Path(...),
    current_employee_id: int = Depends(get_current_employee_id),
    uow: AbstractUnitOfWork = Depends(get_uow),
):
    result = DeleteSubTaskUseCase().execute(
        sub_task_id, uow, acting_employee_id=current_employee_id
    )
    if result is None:
        return _redirect(PROJECTS_VIEW)


# ===========================================================================
# REGISTER ROUTERS
# ===========================================================================

api_v1.include_router(employee_router)
api_v1.include_router(project_router)
api_v1.include_router(sub_project_router)
api_v1.include_router(task_router)
api_v1.include_router(sub_task_router)

app.include_router(api_v1)


# ===========================================================================
# HEALTH CHECK
# ===========================================================================

@app.get("/health", tags=["Health"], summary="Service health check")
def health():
    return {"status": "ok"}


app.openapi_tags = [
    {"name": "Health", "description": "Liveness check."},
    {
        "name": "Employees",
        "description": "Registration, login and employee listings.  Every employee is either a project manager or a team member.",
    },
    {
        "name": "Projects",
        "description": "Projects and their members.  Only project managers create, edit or delete projects.",
    },
    {"name": "Sub-projects", "description": "Sub-projects group the tasks of a project."},
    {
        "name": "Tasks",
        "description": "Tasks are assigned to one project member.  Team members see only their own tasks.",
    },
    {"name": "Sub-tasks", "description": "Finer-grained steps of a task."},
]
