"""Data models for decoded WebUntis records."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from enum import Enum
from typing import Any, FrozenSet, Generic, Optional, Protocol, Tuple, TypeVar, runtime_checkable


class ElementType(Enum):
    """What a timetable or class register query is scoped to."""

    KLASSE = 1
    TEACHER = 2
    SUBJECT = 3
    ROOM = 4
    STUDENT = 5


class LessonCode(Enum):
    CANCELLED = "cancelled"
    IRREGULAR = "irregular"


# Field groups shared by several records.


@runtime_checkable
class Identified(Protocol):
    id: int
    name: str
    long_name: str


@runtime_checkable
class Activatable(Protocol):
    active: bool


@runtime_checkable
class Colored(Protocol):
    back_color: Optional[str]
    fore_color: Optional[str]


@dataclass(frozen=True)
class Department:
    id: int
    name: str
    long_name: str


@dataclass(frozen=True)
class Holiday:
    id: int
    name: str
    long_name: str
    start_date: date
    end_date: date

    def covers(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date


@dataclass(frozen=True)
class Klasse:
    id: int
    name: str
    long_name: str
    active: bool


@dataclass(frozen=True)
class Room:
    id: int
    name: str
    long_name: str
    active: bool
    building: str


@dataclass(frozen=True)
class SchoolYear:
    id: int
    name: str
    start_date: date
    end_date: date


@dataclass(frozen=True)
class Subject:
    id: int
    name: str
    long_name: str
    active: bool
    alternate_name: str
    back_color: Optional[str] = None
    fore_color: Optional[str] = None


@dataclass(frozen=True)
class Teacher:
    id: int
    name: str
    long_name: str
    active: bool
    title: str
    fore_name: str


@dataclass(frozen=True)
class TimeUnit:
    name: str
    start_time: time
    end_time: time


@dataclass(frozen=True)
class TimegridUnit:
    day: int  # 1 = Sunday ... 7 = Saturday
    time_units: Tuple[TimeUnit, ...] = ()


@dataclass(frozen=True)
class Lesson:
    date: date
    start_time: time
    end_time: time
    klasse_ids: FrozenSet[int] = frozenset()
    teacher_ids: FrozenSet[int] = frozenset()
    subject_ids: FrozenSet[int] = frozenset()
    room_ids: FrozenSet[int] = frozenset()
    code: Optional[LessonCode] = None
    activity_type: str = ""

    @property
    def cancelled(self) -> bool:
        return self.code is LessonCode.CANCELLED


@dataclass(frozen=True)
class LatestImportTime:
    timestamp: int  # milliseconds since the epoch

    def as_datetime(self) -> datetime:
        return datetime.fromtimestamp(self.timestamp / 1000, tz=timezone.utc)


T = TypeVar("T")


class Records(list, Generic[T]):
    """Records in server order with simple lookup helpers.

    Field names are record attribute names; an unknown name raises
    ``ValueError``.
    """

    def find(self, **fields: Any) -> Optional[T]:
        return next((r for r in self if _matches(r, fields)), None)

    def filter(self, **fields: Any) -> "Records[T]":
        return Records(r for r in self if _matches(r, fields))

    def search(self, field_name: str, fragment: Any) -> "Records[T]":
        """Records whose ``field_name`` contains ``fragment`` as text."""
        needle = str(fragment)
        return Records(r for r in self if needle in str(_field(r, field_name)))

    def find_by_id(self, record_id: int) -> Optional[T]:
        return self.find(id=record_id)

    def active(self) -> "Records[T]":
        return Records(r for r in self if isinstance(r, Activatable) and r.active)


def _field(record: Any, name: str) -> Any:
    try:
        return getattr(record, name)
    except AttributeError:
        raise ValueError(f"{type(record).__name__} has no field {name!r}") from None


def _matches(record: Any, fields: dict) -> bool:
    return all(_field(record, k) == v for k, v in fields.items())
