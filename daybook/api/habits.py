# daybook/api/habits.py
import logging
from datetime import date

from fastapi import APIRouter, Depends, status

from daybook import schemas, services
from daybook.core.exceptions import BadRequestException, NotFoundException
from daybook.dependencies import get_current_user, get_repositories
from daybook.repositories import Repositories

router = APIRouter(prefix="/api/habits", tags=["Habits"])
logger = logging.getLogger("daybook")


def _get_owned_habit(repos: Repositories, habit_id: str, owner_id: str) -> schemas.Habit:
    habit = repos.habits.get_by_id(habit_id, owner_id)
    if not habit:
        raise NotFoundException("Habit not found")
    return habit


@router.get("", response_model=schemas.ApiResponse[list[schemas.Habit]])
def get_habits(
    repos: Repositories = Depends(get_repositories),
    current_user: schemas.User = Depends(get_current_user),
):
    habits = repos.habits.list_for_owner(current_user.id)
    return {"success": True, "data": habits}


@router.get("/date/{day}", response_model=schemas.ApiResponse[list[schemas.HabitWithCompletion]])
def get_habits_for_date(
    day: date,
    repos: Repositories = Depends(get_repositories),
    current_user: schemas.User = Depends(get_current_user),
):
    habits = services.habits_for_date(repos, current_user.id, day)
    logger.info(f"{current_user.email} — {len(habits)} habits due on {day}")
    return {"success": True, "data": habits}


@router.get("/{habit_id}", response_model=schemas.ApiResponse[schemas.Habit])
def get_habit(
    habit_id: str,
    repos: Repositories = Depends(get_repositories),
    current_user: schemas.User = Depends(get_current_user),
):
    return {"success": True, "data": _get_owned_habit(repos, habit_id, current_user.id)}


@router.post("", status_code=status.HTTP_201_CREATED,
             response_model=schemas.ApiResponse[schemas.Habit])
def create_habit(
    habit: schemas.HabitCreate,
    repos: Repositories = Depends(get_repositories),
    current_user: schemas.User = Depends(get_current_user),
):
    new_habit = repos.habits.create(current_user.id, habit)
    logger.info(f"{current_user.email} — created habit: '{habit.title}'")
    return {"success": True, "data": new_habit}


@router.put("/{habit_id}", response_model=schemas.ApiResponse[schemas.Habit])
def update_habit(
    habit_id: str,
    payload: schemas.HabitUpdate,
    repos: Repositories = Depends(get_repositories),
    current_user: schemas.User = Depends(get_current_user),
):
    current = _get_owned_habit(repos, habit_id, current_user.id)
    changes = payload.changes()

    frequency   = changes.get("frequency", current.frequency)
    target_days = changes.get("target_days", current.target_days)
    if frequency == "weekly" and not target_days:
        raise BadRequestException("Weekly habits need at least one target day")

    habit = repos.habits.update(habit_id, current_user.id, changes)
    if not habit:
        raise NotFoundException("Habit not found")
    logger.info(f"{current_user.email} — updated habit {habit_id}")
    return {"success": True, "data": habit}


@router.delete("/{habit_id}")
def delete_habit(
    habit_id: str,
    repos: Repositories = Depends(get_repositories),
    current_user: schemas.User = Depends(get_current_user),
):
    if not repos.habits.delete(habit_id, current_user.id):
        raise NotFoundException("Habit not found")
    logger.info(f"{current_user.email} — deleted habit {habit_id}")
    return {"success": True, "message": "Habit deleted successfully"}


@router.get("/{habit_id}/completions",
            response_model=schemas.ApiResponse[list[schemas.HabitCompletion]])
def get_habit_completions(
    habit_id: str,
    start: date,
    end: date,
    repos: Repositories = Depends(get_repositories),
    current_user: schemas.User = Depends(get_current_user),
):
    if start > end:
        raise BadRequestException("start must not be after end")
    _get_owned_habit(repos, habit_id, current_user.id)
    completions = repos.completions.completions_in_range(habit_id, current_user.id, start, end)
    return {"success": True, "data": completions}


@router.patch("/{habit_id}/complete", response_model=schemas.ApiResponse[schemas.HabitCompletion])
def mark_habit_complete(
    habit_id: str,
    payload: schemas.CompletionCreate,
    repos: Repositories = Depends(get_repositories),
    current_user: schemas.User = Depends(get_current_user),
):
    _get_owned_habit(repos, habit_id, current_user.id)
    completion = repos.completions.mark_complete(habit_id, current_user.id, payload.date)
    logger.info(f"{current_user.email} — completed habit {habit_id} on {payload.date}")
    return {"success": True, "data": completion}


@router.delete("/{habit_id}/complete/{day}")
def mark_habit_incomplete(
    habit_id: str,
    day: date,
    repos: Repositories = Depends(get_repositories),
    current_user: schemas.User = Depends(get_current_user),
):
    _get_owned_habit(repos, habit_id, current_user.id)
    if not repos.completions.mark_incomplete(habit_id, current_user.id, day):
        raise NotFoundException("Completion not found")
    logger.info(f"{current_user.email} — un-completed habit {habit_id} on {day}")
    return {"success": True, "message": "Habit marked incomplete"}


@router.get("/{habit_id}/streak", response_model=schemas.ApiResponse[schemas.StreakResponse])
def get_habit_streak(
    habit_id: str,
    repos: Repositories = Depends(get_repositories),
    current_user: schemas.User = Depends(get_current_user),
):
    habit = _get_owned_habit(repos, habit_id, current_user.id)
    completions = repos.completions.list_for_habit(habit_id, current_user.id)
    streak = services.compute_streak(habit, completions)
    return {"success": True, "data": {"streak": streak}}
