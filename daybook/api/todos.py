# daybook/api/todos.py
import logging
from datetime import date

from fastapi import APIRouter, Depends, status

from daybook import schemas
from daybook.core.exceptions import BadRequestException, NotFoundException
from daybook.dependencies import get_current_user, get_repositories
from daybook.repositories import Repositories

router = APIRouter(prefix="/api/todos", tags=["Todos"])
logger = logging.getLogger("daybook")


@router.get("", response_model=schemas.ApiResponse[list[schemas.Todo]])
def get_todos(
    repos: Repositories = Depends(get_repositories),
    current_user: schemas.User = Depends(get_current_user),
):
    return {"success": True, "data": repos.todos.list_for_owner(current_user.id)}


@router.get("/range/{start}/{end}", response_model=schemas.ApiResponse[list[schemas.Todo]])
def get_todos_in_range(
    start: date,
    end: date,
    repos: Repositories = Depends(get_repositories),
    current_user: schemas.User = Depends(get_current_user),
):
    if start > end:
        raise BadRequestException("start must not be after end")
    return {"success": True, "data": repos.todos.in_range(current_user.id, start, end)}


@router.get("/{todo_id}", response_model=schemas.ApiResponse[schemas.Todo])
def get_todo(
    todo_id: str,
    repos: Repositories = Depends(get_repositories),
    current_user: schemas.User = Depends(get_current_user),
):
    todo = repos.todos.get_by_id(todo_id, current_user.id)
    if not todo:
        raise NotFoundException("Todo not found")
    return {"success": True, "data": todo}


@router.post("", status_code=status.HTTP_201_CREATED,
             response_model=schemas.ApiResponse[schemas.Todo])
def create_todo(
    todo: schemas.TodoCreate,
    repos: Repositories = Depends(get_repositories),
    current_user: schemas.User = Depends(get_current_user),
):
    new_todo = repos.todos.create(current_user.id, todo)
    logger.info(f"{current_user.email} — created todo: '{todo.title}'")
    return {"success": True, "data": new_todo}


@router.put("/{todo_id}", response_model=schemas.ApiResponse[schemas.Todo])
def update_todo(
    todo_id: str,
    payload: schemas.TodoUpdate,
    repos: Repositories = Depends(get_repositories),
    current_user: schemas.User = Depends(get_current_user),
):
    todo = repos.todos.update(todo_id, current_user.id, payload.changes())
    if not todo:
        raise NotFoundException("Todo not found")
    logger.info(f"{current_user.email} — updated todo {todo_id}")
    return {"success": True, "data": todo}


@router.delete("/{todo_id}")
def delete_todo(
    todo_id: str,
    repos: Repositories = Depends(get_repositories),
    current_user: schemas.User = Depends(get_current_user),
):
    if not repos.todos.delete(todo_id, current_user.id):
        raise NotFoundException("Todo not found")
    logger.info(f"{current_user.email} — deleted todo {todo_id}")
    return {"success": True, "message": "Todo deleted successfully"}


@router.patch("/{todo_id}/toggle", response_model=schemas.ApiResponse[schemas.Todo])
def toggle_todo(
    todo_id: str,
    repos: Repositories = Depends(get_repositories),
    current_user: schemas.User = Depends(get_current_user),
):
    todo = repos.todos.toggle(todo_id, current_user.id)
    if not todo:
        raise NotFoundException("Todo not found")
    logger.info(f"{current_user.email} — toggled todo {todo_id} → {todo.completed}")
    return {"success": True, "data": todo}
