# daybook/schemas.py
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel
from datetime import datetime, date, timezone
from typing import ClassVar, Generic, Literal, Optional, TypeVar

T = TypeVar('T')

ALL_WEEKDAYS = [0, 1, 2, 3, 4, 5, 6]   # 0 = Sunday
DEFAULT_HABIT_COLOR = "#3B82F6"

Frequency = Literal["daily", "weekly"]
Priority  = Literal["low", "medium", "high"]


class CamelModel(BaseModel):
    """Serialises as camelCase on the wire and on disk, accepts either on input."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class PartialUpdate(CamelModel):
    # Fields an explicit null is allowed to clear
    nullable_fields: ClassVar[frozenset[str]] = frozenset()

    def changes(self) -> dict:
        return {
            k: v for k, v in self.model_dump(exclude_unset=True).items()
            if v is not None or k in self.nullable_fields
        }


def _require_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    value = value.strip()
    if not value:
        raise ValueError("must not be empty")
    return value


def _assume_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _normalize_weekdays(days: Optional[list[int]]) -> Optional[list[int]]:
    if days is None:
        return days
    for day in days:
        if day not in ALL_WEEKDAYS:
            raise ValueError(f"weekday {day} is out of range 0-6 (0 = Sunday)")
    return sorted(set(days))


class ApiResponse(BaseModel, Generic[T]):
    success: bool = True
    data:    Optional[T] = None


# ════════════════════════════════════════
# AUTH / USER
# ════════════════════════════════════════

class User(CamelModel):
    id:            str
    email:         str
    password_hash: str
    created_at:    datetime
    updated_at:    datetime


class UserPublic(CamelModel):
    id:         str
    email:      str
    created_at: datetime
    updated_at: datetime


class UserCreate(BaseModel):
    email:    EmailStr
    password: str = Field(min_length=6)


class LoginRequest(BaseModel):
    email:    str
    password: str


class AuthResponse(CamelModel):
    user:  UserPublic
    token: str


class CurrentUser(CamelModel):
    user_id: str
    email:   str


# ════════════════════════════════════════
# HABITS
# ════════════════════════════════════════

class Habit(CamelModel):
    id:          str
    owner_id:    str
    title:       str
    description: str = ""
    frequency:   Frequency = "daily"
    target_days: list[int] = Field(default_factory=lambda: list(ALL_WEEKDAYS))
    color:       str = DEFAULT_HABIT_COLOR
    created_at:  datetime
    updated_at:  datetime


class HabitWithCompletion(Habit):
    completed: bool
    streak:    Optional[int] = None


class HabitCreate(CamelModel):
    title:       str
    description: str = ""
    frequency:   Frequency = "daily"
    target_days: list[int] = Field(default_factory=lambda: list(ALL_WEEKDAYS))
    color:       str = DEFAULT_HABIT_COLOR

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value):
        return _require_text(value)

    @field_validator("target_days")
    @classmethod
    def valid_weekdays(cls, value):
        return _normalize_weekdays(value)

    @model_validator(mode="after")
    def weekly_needs_target_days(self):
        if self.frequency == "weekly" and not self.target_days:
            raise ValueError("weekly habits need at least one target day")
        return self


class HabitUpdate(PartialUpdate):
    title:       Optional[str] = None
    description: Optional[str] = None
    frequency:   Optional[Frequency] = None
    target_days: Optional[list[int]] = None
    color:       Optional[str] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value):
        return _require_text(value)

    @field_validator("target_days")
    @classmethod
    def valid_weekdays(cls, value):
        return _normalize_weekdays(value)


class HabitCompletion(CamelModel):
    habit_id:     str
    owner_id:     str
    date:         date
    completed_at: datetime


class CompletionCreate(BaseModel):
    date: date


class StreakResponse(BaseModel):
    streak: int


# ════════════════════════════════════════
# TODOS
# ════════════════════════════════════════

class Todo(CamelModel):
    id:           str
    owner_id:     str
    title:        str
    description:  str = ""
    completed:    bool = False
    due_date:     Optional[datetime] = None
    priority:     Priority = "medium"
    created_at:   datetime
    updated_at:   datetime
    completed_at: Optional[datetime] = None


class TodoCreate(CamelModel):
    title:       str
    description: str = ""
    due_date:    Optional[datetime] = None
    priority:    Priority = "medium"

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value):
        return _require_text(value)

    @field_validator("due_date")
    @classmethod
    def due_date_utc(cls, value):
        return _assume_utc(value)


class TodoUpdate(PartialUpdate):
    nullable_fields: ClassVar[frozenset[str]] = frozenset({"due_date"})

    title:       Optional[str] = None
    description: Optional[str] = None
    completed:   Optional[bool] = None
    due_date:    Optional[datetime] = None
    priority:    Optional[Priority] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value):
        return _require_text(value)

    @field_validator("due_date")
    @classmethod
    def due_date_utc(cls, value):
        return _assume_utc(value)


# ════════════════════════════════════════
# EVENTS
# ════════════════════════════════════════

class Event(CamelModel):
    id:          str
    owner_id:    str
    title:       str
    description: str = ""
    start_date:  datetime
    end_date:    datetime
    duration:    int             # minutes
    created_at:  datetime
    updated_at:  datetime


class EventCreate(CamelModel):
    title:       str
    description: str = ""
    start_date:  datetime
    end_date:    datetime
    duration:    int = Field(gt=0)

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value):
        return _require_text(value)

    @field_validator("start_date", "end_date")
    @classmethod
    def dates_utc(cls, value):
        return _assume_utc(value)

    @model_validator(mode="after")
    def end_after_start(self):
        if self.end_date < self.start_date:
            raise ValueError("endDate must not be before startDate")
        return self


class EventUpdate(PartialUpdate):
    title:       Optional[str] = None
    description: Optional[str] = None
    start_date:  Optional[datetime] = None
    end_date:    Optional[datetime] = None
    duration:    Optional[int] = Field(default=None, gt=0)

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value):
        return _require_text(value)

    @field_validator("start_date", "end_date")
    @classmethod
    def dates_utc(cls, value):
        return _assume_utc(value)
