# daybook/services.py
"""
Habit recurrence and streak engine.

Everything here works on calendar dates: datetimes are cut down to their
date before any comparison, and weekdays are numbered 0 = Sunday ... 6 =
Saturday (the numbering stored in ``Habit.target_days``).
"""
from datetime import date, datetime, timedelta
from typing import Iterable, Iterator, Optional

from daybook.schemas import Habit, HabitCompletion, HabitWithCompletion

WEEKLY_STREAK_MAX_GAP = 7


# ════════════════════════════════════════
# DATE HELPERS
# ════════════════════════════════════════

def to_calendar_date(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def weekday_index(day: date) -> int:
    """0 = Sunday, 6 = Saturday."""
    return day.isoweekday() % 7


def days_between(later: date, earlier: date) -> int:
    return (to_calendar_date(later) - to_calendar_date(earlier)).days


def in_range(day: date, start: date, end: date) -> bool:
    return start <= day <= end


def iter_dates(start: date, end: date) -> Iterator[date]:
    day = start
    while day <= end:
        yield day
        day += timedelta(days=1)


# ════════════════════════════════════════
# RECURRENCE
# ════════════════════════════════════════

def is_due(habit: Habit, day: date | datetime) -> bool:
    if habit.frequency == "daily":
        return True
    return weekday_index(to_calendar_date(day)) in habit.target_days


def due_dates(habit: Habit, start: date, end: date) -> list[date]:
    return [day for day in iter_dates(start, end) if is_due(habit, day)]


# ════════════════════════════════════════
# STREAKS
# ════════════════════════════════════════

def compute_streak(habit: Habit, completions: Iterable[HabitCompletion],
                   reference_date: Optional[date | datetime] = None) -> int:
    """
    Count consecutive completions walking back from ``reference_date``
    (today by default).

    Daily habits allow a gap of 0 or 1 day between the cursor and the next
    completion, so a habit done through yesterday keeps its streak today.

    Weekly habits only count completions on target weekdays and allow a gap
    of up to 7 days. That threshold does not check that the completions sit
    on consecutive scheduled occurrences: with several target days per week
    a skipped occurrence still counts as continuous. The rule is kept as is
    for compatibility with existing streak numbers.

    Completions dated after the reference date are ignored.
    """
    cursor = to_calendar_date(reference_date or date.today())
    dates = sorted(
        (c.date for c in completions if c.habit_id == habit.id and c.date <= cursor),
        reverse=True,
    )

    streak = 0
    for day in dates:
        gap = days_between(cursor, day)

        if habit.frequency == "daily":
            if gap in (0, 1):
                streak += 1
                cursor = day
            else:
                break   # gap found, streak is broken

        elif weekday_index(day) in habit.target_days:
            if gap <= WEEKLY_STREAK_MAX_GAP:
                streak += 1
                cursor = day
            else:
                break

    return streak


# ════════════════════════════════════════
# HABITS FOR A DATE
# ════════════════════════════════════════

def habits_for_date(repos, owner_id: str, day: date,
                    today: Optional[date] = None) -> list[HabitWithCompletion]:
    """
    The owner's habits that are due on ``day``, each with whether it was
    completed that day and its current streak as of ``today``.
    """
    today = today or date.today()
    completions = repos.completions.list_for_owner(owner_id)

    by_habit: dict[str, list[HabitCompletion]] = {}
    for completion in completions:
        by_habit.setdefault(completion.habit_id, []).append(completion)

    result = []
    for habit in repos.habits.list_for_owner(owner_id):
        if not is_due(habit, day):
            continue
        own = by_habit.get(habit.id, [])
        result.append(HabitWithCompletion(
            **habit.model_dump(),
            completed=any(c.date == day for c in own),
            streak=compute_streak(habit, own, today),
        ))
    return result
