# daybook/repositories.py
"""
Entity repositories over the record stores.

Every operation reads the whole collection, changes it in memory and writes
the whole collection back while holding the collection's lock. Owned
entities are always filtered by ``owner_id``; a record owned by someone else
looks exactly like a missing one.
"""
import logging
import uuid
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Callable, Generic, Optional, TypeVar

from pydantic import BaseModel

from daybook.schemas import (
    Event, EventCreate, Habit, HabitCompletion, HabitCreate,
    Todo, TodoCreate, User,
)
from daybook.services import in_range, to_calendar_date
from daybook.storage import RecordStore

logger = logging.getLogger("daybook.repositories")

M = TypeVar("M", bound=BaseModel)


def new_id() -> str:
    return str(uuid.uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Repository(Generic[M]):
    model: type[M]

    def __init__(
        self,
        store: RecordStore,
        id_factory: Callable[[], str] = new_id,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.id_factory = id_factory
        self.clock = clock

    def _load(self) -> list[M]:
        return [self.model.model_validate(record) for record in self.store.load()]

    def _save(self, items: list[M]) -> None:
        self.store.save([item.model_dump(mode="json", by_alias=True) for item in items])

    def _insert(self, item: M) -> M:
        with self.store.lock:
            items = self._load()
            items.append(item)
            self._save(items)
        return item


class OwnedRepository(Repository[M]):
    """CRUD for entities that carry ``id`` and ``owner_id``."""

    def list_for_owner(self, owner_id: str) -> list[M]:
        return [item for item in self._load() if item.owner_id == owner_id]

    def get_by_id(self, item_id: str, owner_id: str) -> Optional[M]:
        return next(
            (item for item in self._load() if item.id == item_id and item.owner_id == owner_id),
            None,
        )

    def update(self, item_id: str, owner_id: str, changes: dict) -> Optional[M]:
        """Merge ``changes`` into the record. ``id`` and ``owner_id`` never change."""
        with self.store.lock:
            items = self._load()
            index = self._index_of(items, item_id, owner_id)
            if index is None:
                return None

            current = items[index]
            updated = current.model_copy(update={
                **self._merge(current, changes),
                "id":         current.id,
                "owner_id":   current.owner_id,
                "updated_at": self.clock(),
            })
            items[index] = updated
            self._save(items)
        return updated

    def delete(self, item_id: str, owner_id: str) -> bool:
        with self.store.lock:
            items = self._load()
            remaining = [i for i in items if not (i.id == item_id and i.owner_id == owner_id)]
            if len(remaining) == len(items):
                return False
            self._save(remaining)
        return True

    def _merge(self, current: M, changes: dict) -> dict:
        return dict(changes)

    @staticmethod
    def _index_of(items: list[M], item_id: str, owner_id: str) -> Optional[int]:
        for index, item in enumerate(items):
            if item.id == item_id and item.owner_id == owner_id:
                return index
        return None


# ════════════════════════════════════════
# HABITS
# ════════════════════════════════════════

class CompletionRepository(Repository[HabitCompletion]):
    model = HabitCompletion

    def mark_complete(self, habit_id: str, owner_id: str, on: date) -> HabitCompletion:
        """Record that the habit was done on ``on``. Returns the existing record if there is one."""
        with self.store.lock:
            completions = self._load()
            existing = next(
                (c for c in completions
                 if c.habit_id == habit_id and c.owner_id == owner_id and c.date == on),
                None,
            )
            if existing:
                return existing

            completion = HabitCompletion(
                habit_id=habit_id,
                owner_id=owner_id,
                date=on,
                completed_at=self.clock(),
            )
            completions.append(completion)
            self._save(completions)
        return completion

    def mark_incomplete(self, habit_id: str, owner_id: str, on: date) -> bool:
        with self.store.lock:
            completions = self._load()
            remaining = [
                c for c in completions
                if not (c.habit_id == habit_id and c.owner_id == owner_id and c.date == on)
            ]
            if len(remaining) == len(completions):
                return False
            self._save(remaining)
        return True

    def completions_in_range(self, habit_id: str, owner_id: str,
                             start: date, end: date) -> list[HabitCompletion]:
        return [c for c in self.list_for_habit(habit_id, owner_id) if in_range(c.date, start, end)]

    def list_for_habit(self, habit_id: str, owner_id: str) -> list[HabitCompletion]:
        return [c for c in self._load() if c.habit_id == habit_id and c.owner_id == owner_id]

    def list_for_owner(self, owner_id: str) -> list[HabitCompletion]:
        return [c for c in self._load() if c.owner_id == owner_id]

    def delete_for_habit(self, habit_id: str, owner_id: str) -> int:
        with self.store.lock:
            completions = self._load()
            remaining = [
                c for c in completions
                if not (c.habit_id == habit_id and c.owner_id == owner_id)
            ]
            removed = len(completions) - len(remaining)
            if removed:
                self._save(remaining)
        return removed


class HabitRepository(OwnedRepository[Habit]):
    model = Habit

    def __init__(self, store: RecordStore, completions: CompletionRepository, **kwargs):
        super().__init__(store, **kwargs)
        self.completions = completions

    def create(self, owner_id: str, data: HabitCreate) -> Habit:
        now = self.clock()
        habit = Habit(
            id=self.id_factory(),
            owner_id=owner_id,
            created_at=now,
            updated_at=now,
            **data.model_dump(),
        )
        return self._insert(habit)

    def delete(self, item_id: str, owner_id: str) -> bool:
        """Delete the habit and every completion recorded for it."""
        # Lock order is always habits, then completions
        with self.store.lock:
            if self.get_by_id(item_id, owner_id) is None:
                return False
            removed = self.completions.delete_for_habit(item_id, owner_id)
            logger.debug(f"Removed {removed} completions of habit {item_id}")
            return super().delete(item_id, owner_id)


# ════════════════════════════════════════
# TODOS
# ════════════════════════════════════════

class TodoRepository(OwnedRepository[Todo]):
    model = Todo

    def create(self, owner_id: str, data: TodoCreate) -> Todo:
        now = self.clock()
        todo = Todo(
            id=self.id_factory(),
            owner_id=owner_id,
            completed=False,
            created_at=now,
            updated_at=now,
            **data.model_dump(),
        )
        return self._insert(todo)

    def _merge(self, current: Todo, changes: dict) -> dict:
        merged = dict(changes)
        if changes.get("completed") is True:
            merged["completed_at"] = current.completed_at or self.clock()
        elif changes.get("completed") is False:
            merged["completed_at"] = None
        return merged

    def toggle(self, item_id: str, owner_id: str) -> Optional[Todo]:
        with self.store.lock:
            todo = self.get_by_id(item_id, owner_id)
            if todo is None:
                return None
            return self.update(item_id, owner_id, {"completed": not todo.completed})

    def in_range(self, owner_id: str, start: date, end: date) -> list[Todo]:
        """Todos whose due date falls on a calendar day between ``start`` and ``end``."""
        return [
            t for t in self.list_for_owner(owner_id)
            if t.due_date is not None and in_range(to_calendar_date(t.due_date), start, end)
        ]


# ════════════════════════════════════════
# EVENTS
# ════════════════════════════════════════

class EventRepository(OwnedRepository[Event]):
    model = Event

    def create(self, owner_id: str, data: EventCreate) -> Event:
        now = self.clock()
        event = Event(
            id=self.id_factory(),
            owner_id=owner_id,
            created_at=now,
            updated_at=now,
            **data.model_dump(),
        )
        return self._insert(event)


# ════════════════════════════════════════
# USERS
# ════════════════════════════════════════

class UserRepository(Repository[User]):
    model = User

    def get_by_email(self, email: str) -> Optional[User]:
        email = email.lower()
        return next((u for u in self._load() if u.email.lower() == email), None)

    def get_by_id(self, user_id: str) -> Optional[User]:
        return next((u for u in self._load() if u.id == user_id), None)

    def create(self, email: str, password_hash: str) -> Optional[User]:
        """Returns None when the email is already registered."""
        with self.store.lock:
            if self.get_by_email(email):
                return None
            now = self.clock()
            user = User(
                id=self.id_factory(),
                email=email.lower(),
                password_hash=password_hash,
                created_at=now,
                updated_at=now,
            )
            return self._insert(user)


@dataclass
class Repositories:
    users:       UserRepository
    habits:      HabitRepository
    completions: CompletionRepository
    todos:       TodoRepository
    events:      EventRepository

    @classmethod
    def from_stores(
        cls,
        stores: dict[str, RecordStore],
        id_factory: Callable[[], str] = new_id,
        clock: Callable[[], datetime] = utc_now,
    ) -> "Repositories":
        completions = CompletionRepository(stores["habit_completions"], id_factory=id_factory, clock=clock)
        return cls(
            users=UserRepository(stores["users"], id_factory=id_factory, clock=clock),
            habits=HabitRepository(stores["habits"], completions, id_factory=id_factory, clock=clock),
            completions=completions,
            todos=TodoRepository(stores["todos"], id_factory=id_factory, clock=clock),
            events=EventRepository(stores["events"], id_factory=id_factory, clock=clock),
        )
