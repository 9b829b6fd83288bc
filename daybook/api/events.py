# daybook/api/events.py
import logging

from fastapi import APIRouter, Depends, status

from daybook import schemas
from daybook.core.exceptions import BadRequestException, NotFoundException
from daybook.dependencies import get_current_user, get_repositories
from daybook.repositories import Repositories

router = APIRouter(prefix="/api/events", tags=["Events"])
logger = logging.getLogger("daybook")


def _get_owned_event(repos: Repositories, event_id: str, owner_id: str) -> schemas.Event:
    event = repos.events.get_by_id(event_id, owner_id)
    if not event:
        raise NotFoundException("Event not found")
    return event


@router.get("", response_model=schemas.ApiResponse[list[schemas.Event]])
def get_events(
    repos: Repositories = Depends(get_repositories),
    current_user: schemas.User = Depends(get_current_user),
):
    return {"success": True, "data": repos.events.list_for_owner(current_user.id)}


@router.get("/{event_id}", response_model=schemas.ApiResponse[schemas.Event])
def get_event(
    event_id: str,
    repos: Repositories = Depends(get_repositories),
    current_user: schemas.User = Depends(get_current_user),
):
    return {"success": True, "data": _get_owned_event(repos, event_id, current_user.id)}


@router.post("", status_code=status.HTTP_201_CREATED,
             response_model=schemas.ApiResponse[schemas.Event])
def create_event(
    event: schemas.EventCreate,
    repos: Repositories = Depends(get_repositories),
    current_user: schemas.User = Depends(get_current_user),
):
    new_event = repos.events.create(current_user.id, event)
    logger.info(f"{current_user.email} — created event: '{event.title}'")
    return {"success": True, "data": new_event}


@router.put("/{event_id}", response_model=schemas.ApiResponse[schemas.Event])
def update_event(
    event_id: str,
    payload: schemas.EventUpdate,
    repos: Repositories = Depends(get_repositories),
    current_user: schemas.User = Depends(get_current_user),
):
    current = _get_owned_event(repos, event_id, current_user.id)
    changes = payload.changes()

    start = changes.get("start_date", current.start_date)
    end   = changes.get("end_date", current.end_date)
    if end < start:
        raise BadRequestException("endDate must not be before startDate")

    event = repos.events.update(event_id, current_user.id, changes)
    if not event:
        raise NotFoundException("Event not found")
    logger.info(f"{current_user.email} — updated event {event_id}")
    return {"success": True, "data": event}


@router.delete("/{event_id}")
def delete_event(
    event_id: str,
    repos: Repositories = Depends(get_repositories),
    current_user: schemas.User = Depends(get_current_user),
):
    if not repos.events.delete(event_id, current_user.id):
        raise NotFoundException("Event not found")
    logger.info(f"{current_user.email} — deleted event {event_id}")
    return {"success": True, "message": "Event deleted successfully"}
