from datetime import date, datetime
from typing import List, Optional
from uuid import UUID
import logging

from fastapi import APIRouter, Body, Depends, HTTPException, Response, status
from pydantic import Field, field_validator
from sqlalchemy.orm import Session

from tasky.api.deps import get_current_user_id
from tasky.api.dto import ApiModel, date_only
from tasky.config.settings import get_settings
from tasky.engine.scheduler import build_schedule
from tasky.models.entities import ScheduleConfig, ScheduleResult
from tasky.storage.database import ProjectModel, ProjectTaskModel, get_db
from tasky.storage.repositories import ProjectRepository, TaskRepository

router = APIRouter()
tasks_router = APIRouter()
settings = get_settings()
logger = logging.getLogger(__name__)


class ProjectWriteRequest(ApiModel):
    title: str = Field(..., min_length=3, max_length=100)
    description: Optional[str] = Field(None, max_length=500)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str):
        if not v.strip():
            raise ValueError("title must not be blank")
        return v


class ProjectResponse(ApiModel):
    id: UUID
    title: str
    description: Optional[str] = None
    created_at_utc: datetime

    @classmethod
    def from_model(cls, p: ProjectModel) -> "ProjectResponse":
        return cls(id=p.id, title=p.title, description=p.description, created_at_utc=p.created_at_utc)


class TaskCreateRequest(ApiModel):
    title: str = Field(..., min_length=1)
    due_date: Optional[date] = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str):
        if not v.strip():
            raise ValueError("title must not be blank")
        return v

    @field_validator("due_date", mode="before")
    @classmethod
    def strip_time(cls, v):
        return date_only(v)


class TaskUpdateRequest(TaskCreateRequest):
    is_completed: bool = False


class TaskResponse(ApiModel):
    id: UUID
    title: str
    due_date: Optional[date] = None
    is_completed: bool
    created_at_utc: datetime

    @classmethod
    def from_model(cls, t: ProjectTaskModel) -> "TaskResponse":
        return cls(
            id=t.id,
            title=t.title,
            due_date=t.due_date,
            is_completed=t.is_completed,
            created_at_utc=t.created_at_utc,
        )


class ProjectDetailResponse(ProjectResponse):
    tasks: List[TaskResponse] = []


class ScheduleInput(ApiModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    daily_capacity: int = Field(default_factory=lambda: get_settings().schedule_default_capacity)
    working_days: Optional[List[Optional[str]]] = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def strip_time(cls, v):
        return date_only(v)

    def to_domain(self) -> ScheduleConfig:
        return ScheduleConfig(
            start_date=self.start_date,
            end_date=self.end_date,
            daily_capacity=self.daily_capacity,
            working_days=self.working_days,
        )


class DayPlanDTO(ApiModel):
    date: date
    task_ids: List[UUID]


class ScheduleResponse(ApiModel):
    project_id: UUID
    generated_at_utc: datetime
    days: List[DayPlanDTO]

    @classmethod
    def from_domain(cls, result: ScheduleResult) -> "ScheduleResponse":
        return cls(
            project_id=result.project_id,
            generated_at_utc=result.generated_at,
            days=[DayPlanDTO(date=d.date, task_ids=list(d.task_ids)) for d in result.days],
        )


def _not_found(what: str) -> HTTPException:
    return HTTPException(status_code=404, detail=f"{what} not found")


def _no_content() -> Response:
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ---------- projects ----------

@router.get("", response_model=List[ProjectResponse], summary="List the caller's projects")
def list_projects(user_id: UUID = Depends(get_current_user_id), db: Session = Depends(get_db)):
    projects = ProjectRepository(db).list_for_user(user_id)
    return [ProjectResponse.from_model(p) for p in projects]


@router.get("/{project_id}", response_model=ProjectDetailResponse, summary="Get a project with its tasks")
def get_project(project_id: UUID, user_id: UUID = Depends(get_current_user_id), db: Session = Depends(get_db)):
    project = ProjectRepository(db).get_for_user(user_id, project_id)
    if not project:
        raise _not_found("Project")
    tasks = TaskRepository(db).list_for_project(project_id)
    return ProjectDetailResponse(
        id=project.id,
        title=project.title,
        description=project.description,
        created_at_utc=project.created_at_utc,
        tasks=[TaskResponse.from_model(t) for t in tasks],
    )


@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED, summary="Create a project")
def create_project(
    req: ProjectWriteRequest,
    response: Response,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    project = ProjectRepository(db).create(user_id, req.title, req.description)
    logger.info(f"User {user_id} created project {project.id}")
    response.headers["Location"] = f"/api/v1/projects/{project.id}"
    return ProjectResponse.from_model(project)


@router.put("/{project_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Update a project")
def update_project(
    project_id: UUID,
    req: ProjectWriteRequest,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    if not ProjectRepository(db).update(user_id, project_id, req.title, req.description):
        raise _not_found("Project")
    return _no_content()


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a project and its tasks")
def delete_project(project_id: UUID, user_id: UUID = Depends(get_current_user_id), db: Session = Depends(get_db)):
    if not ProjectRepository(db).delete(user_id, project_id):
        raise _not_found("Project")
    logger.info(f"User {user_id} deleted project {project_id}")
    return _no_content()


# ---------- tasks nested under a project ----------

@router.get("/{project_id}/tasks", response_model=List[TaskResponse], summary="List a project's tasks")
def list_project_tasks(project_id: UUID, user_id: UUID = Depends(get_current_user_id), db: Session = Depends(get_db)):
    if ProjectRepository(db).get_for_user(user_id, project_id) is None:
        return []
    return [TaskResponse.from_model(t) for t in TaskRepository(db).list_for_project(project_id)]


@router.post(
    "/{project_id}/tasks",
    response_model=TaskResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a task to a project",
)
def create_project_task(
    project_id: UUID,
    req: TaskCreateRequest,
    response: Response,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    if ProjectRepository(db).get_for_user(user_id, project_id) is None:
        raise _not_found("Project")
    task = TaskRepository(db).create(project_id, req.title, req.due_date)
    response.headers["Location"] = f"/api/v1/projects/{project_id}/tasks/{task.id}"
    return TaskResponse.from_model(task)


@router.put("/{project_id}/tasks/{task_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Update a task")
def update_project_task(
    project_id: UUID,
    task_id: UUID,
    req: TaskUpdateRequest,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    updated = TaskRepository(db).update(user_id, task_id, req.title, req.due_date, req.is_completed, project_id=project_id)
    if not updated:
        raise _not_found("Task")
    return _no_content()


@router.patch("/{project_id}/tasks/{task_id}/toggle", status_code=status.HTTP_204_NO_CONTENT, summary="Flip completion")
def toggle_project_task(
    project_id: UUID,
    task_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    if not TaskRepository(db).toggle(user_id, task_id, project_id=project_id):
        raise _not_found("Task")
    return _no_content()


@router.delete("/{project_id}/tasks/{task_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a task")
def delete_project_task(
    project_id: UUID,
    task_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    if not TaskRepository(db).delete(user_id, task_id, project_id=project_id):
        raise _not_found("Task")
    return _no_content()


# ---------- scheduler ----------

@router.post("/{project_id}/schedule", response_model=ScheduleResponse, summary="Plan pending tasks across working days")
def schedule_project(
    project_id: UUID,
    req: Optional[ScheduleInput] = Body(None),
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Distribute the project's incomplete tasks over working days.

    **Algorithm**:
    1. Order pending tasks by due date (undated last), then creation time
    2. Walk the span from `startDate` to `endDate`, skipping non-working days
    3. Fill each working day with up to `dailyCapacity` tasks
    4. Append any leftovers to the last working day

    **Defaults:**
    - `startDate`: today (UTC)
    - `endDate`: latest due date among pending tasks, else start + 7 days
    - `dailyCapacity`: 5 (values below 1 count as 1)
    - `workingDays`: Mon-Fri; names match on their first three letters

    **Error Handling:**
    - 404: Project does not exist or belongs to another user
    """
    tasks = ProjectRepository(db).task_snapshot(user_id, project_id)
    if tasks is None:
        logger.warning(f"Schedule requested for unknown project {project_id} by user {user_id}")
        raise _not_found("Project")

    config = (req or ScheduleInput()).to_domain()
    result = build_schedule(project_id, tasks, config, span_days=settings.schedule_default_span_days)

    placed = sum(len(d.task_ids) for d in result.days)
    logger.info(f"Scheduled project {project_id}: {placed} tasks over {len(result.days)} days")
    return ScheduleResponse.from_domain(result)


# ---------- flat task routes ----------

@tasks_router.get("/{task_id}", response_model=TaskResponse, summary="Get a task")
def get_task(task_id: UUID, user_id: UUID = Depends(get_current_user_id), db: Session = Depends(get_db)):
    task = TaskRepository(db).get_for_user(user_id, task_id)
    if not task:
        raise _not_found("Task")
    return TaskResponse.from_model(task)


@tasks_router.put("/{task_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Update a task")
def update_task(
    task_id: UUID,
    req: TaskUpdateRequest,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    if not TaskRepository(db).update(user_id, task_id, req.title, req.due_date, req.is_completed):
        raise _not_found("Task")
    return _no_content()


@tasks_router.patch("/{task_id}/toggle", status_code=status.HTTP_204_NO_CONTENT, summary="Flip completion")
def toggle_task(task_id: UUID, user_id: UUID = Depends(get_current_user_id), db: Session = Depends(get_db)):
    if not TaskRepository(db).toggle(user_id, task_id):
        raise _not_found("Task")
    return _no_content()


@tasks_router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a task")
def delete_task(task_id: UUID, user_id: UUID = Depends(get_current_user_id), db: Session = Depends(get_db)):
    if not TaskRepository(db).delete(user_id, task_id):
        raise _not_found("Task")
    return _no_content()
