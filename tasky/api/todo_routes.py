from datetime import datetime
from typing import List
from uuid import UUID
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from pydantic import Field, field_validator

from tasky.api.dto import ApiModel
from tasky.models.entities import TodoItem
from tasky.storage.memory import InMemoryTodoRepository

router = APIRouter()
logger = logging.getLogger(__name__)

_repository = InMemoryTodoRepository()

MAX_PAGE_SIZE = 200


def get_todo_repository() -> InMemoryTodoRepository:
    return _repository


class TodoWriteRequest(ApiModel):
    description: str = Field(..., min_length=1, max_length=200)

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: str):
        if not v.strip():
            raise ValueError("description must not be blank")
        return v


class TodoUpdateRequest(TodoWriteRequest):
    is_completed: bool = False


class TodoResponse(ApiModel):
    id: UUID
    description: str
    is_completed: bool
    created_at_utc: datetime

    @classmethod
    def from_domain(cls, item: TodoItem) -> "TodoResponse":
        return cls(
            id=item.id,
            description=item.description,
            is_completed=item.is_completed,
            created_at_utc=item.created_at_utc,
        )


class TodoPage(ApiModel):
    total: int
    page: int
    page_size: int
    items: List[TodoResponse]


def filter_items(items: List[TodoItem], status_filter: str, search: str) -> List[TodoItem]:
    if status_filter == "active":
        items = [i for i in items if not i.is_completed]
    elif status_filter == "completed":
        items = [i for i in items if i.is_completed]
    if search:
        needle = search.lower()
        items = [i for i in items if needle in i.description.lower()]
    return items


def sort_items(items: List[TodoItem], sort: str, order: str) -> List[TodoItem]:
    reverse = order != "asc"
    if sort == "description":
        return sorted(items, key=lambda i: i.description, reverse=reverse)
    return sorted(items, key=lambda i: i.created_at_utc, reverse=reverse)


@router.get("", response_model=TodoPage, summary="List to-do items")
def list_todos(
    status_filter: str = Query("all", alias="status", description="all, active or completed"),
    search: str = Query("", description="Case-insensitive substring of the description"),
    sort: str = Query("createdAt", description="createdAt or description"),
    order: str = Query("desc", description="asc or desc"),
    page: int = Query(1),
    page_size: int = Query(20, alias="pageSize"),
    repo: InMemoryTodoRepository = Depends(get_todo_repository),
):
    """
    Filter, search, sort and paginate the to-do list.

    Out-of-range paging values are clamped: `page` to at least 1 and
    `pageSize` to 1..200.
    """
    items = filter_items(repo.list_all(), status_filter.lower(), search.strip())
    items = sort_items(items, sort.lower(), order.lower())

    page = max(1, page)
    page_size = min(max(1, page_size), MAX_PAGE_SIZE)
    offset = (page - 1) * page_size
    window = items[offset:offset + page_size]

    return TodoPage(
        total=len(items),
        page=page,
        page_size=page_size,
        items=[TodoResponse.from_domain(i) for i in window],
    )


@router.get("/{item_id}", response_model=TodoResponse, summary="Get a to-do item")
def get_todo(item_id: UUID, repo: InMemoryTodoRepository = Depends(get_todo_repository)):
    item = repo.get_by_id(item_id)
    if not item:
        raise HTTPException(status_code=404, detail="Task not found")
    return TodoResponse.from_domain(item)


@router.post("", response_model=TodoResponse, status_code=status.HTTP_201_CREATED, summary="Create a to-do item")
def create_todo(
    req: TodoWriteRequest,
    response: Response,
    repo: InMemoryTodoRepository = Depends(get_todo_repository),
):
    item = repo.create(req.description)
    logger.info(f"Created to-do item {item.id}")
    response.headers["Location"] = f"/api/v1/tasks/{item.id}"
    return TodoResponse.from_domain(item)


@router.put("/{item_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Update a to-do item")
def update_todo(item_id: UUID, req: TodoUpdateRequest, repo: InMemoryTodoRepository = Depends(get_todo_repository)):
    if not repo.update(item_id, req.description, req.is_completed):
        raise HTTPException(status_code=404, detail="Task not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/{item_id}/toggle", status_code=status.HTTP_204_NO_CONTENT, summary="Flip completion")
def toggle_todo(item_id: UUID, repo: InMemoryTodoRepository = Depends(get_todo_repository)):
    if not repo.toggle(item_id):
        raise HTTPException(status_code=404, detail="Task not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a to-do item")
def delete_todo(item_id: UUID, repo: InMemoryTodoRepository = Depends(get_todo_repository)):
    if not repo.delete(item_id):
        raise HTTPException(status_code=404, detail="Task not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
