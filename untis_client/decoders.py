"""Decoding of WebUntis JSON payloads into records.

The server encodes dates as ``yyyyMMdd`` integers and times of day as
integers without zero padding (``800`` is 08:00, ``1330`` is 13:30).
"""

from __future__ import annotations

from datetime import date, datetime, time
from enum import Enum
from typing import Any, Callable, FrozenSet, Mapping, Optional, Type, TypeVar

from .errors import DecodeError
from .models import (
    Department,
    Holiday,
    Klasse,
    LatestImportTime,
    Lesson,
    LessonCode,
    Records,
    Room,
    SchoolYear,
    Subject,
    Teacher,
    TimegridUnit,
    TimeUnit,
)

E = TypeVar("E", bound=Enum)
R = TypeVar("R")


def _digits(value: Any, what: str) -> str:
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise DecodeError(f"Expected an integer {what}, got {value!r}")
    text = str(value).strip()
    if not text.isdigit():
        raise DecodeError(f"Expected an integer {what}, got {value!r}")
    return text


def decode_date(value: Any) -> date:
    text = _digits(value, "date")
    if len(text) != 8:
        raise DecodeError(f"Date {value!r} is not in yyyyMMdd form")
    try:
        return datetime.strptime(text, "%Y%m%d").date()
    except ValueError as exc:
        raise DecodeError(f"Invalid date {value!r}") from exc


def _parse_hhmm(text: str) -> time:
    if len(text) != 4:
        raise ValueError(text)
    return time(int(text[:2]), int(text[2:]))


def _parse_hmm(text: str) -> time:
    if len(text) != 3:
        raise ValueError(text)
    return time(int(text[0]), int(text[1:]))


def decode_time(value: Any) -> time:
    """Decode a 3 or 4 digit time of day, trying ``HHmm`` before ``Hmm``."""
    text = _digits(value, "time")
    for parse in (_parse_hhmm, _parse_hmm):
        try:
            return parse(text)
        except ValueError:
            continue
    raise DecodeError(f"Invalid time {value!r}")


def decode_optional_enum(payload: Mapping[str, Any], key: str, enum_type: Type[E]) -> Optional[E]:
    """Return the member named by ``payload[key]`` or ``None`` if the key is absent."""
    raw = payload.get(key)
    if raw is None:
        return None
    if not isinstance(raw, str):
        raise DecodeError(f"Field {key!r} should be a string, got {raw!r}")
    try:
        return enum_type[raw.upper()]
    except KeyError:
        raise DecodeError(f"Unknown {enum_type.__name__} {raw!r}") from None


def collapse_ids(items: Any) -> FrozenSet[int]:
    if not isinstance(items, list):
        raise DecodeError(f"Expected a list of objects, got {items!r}")
    return frozenset(require_int(item, "id") for item in items)


# Required field access.


def require_object(value: Any) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise DecodeError(f"Expected a JSON object, got {value!r}")
    return value


def _require(payload: Any, key: str) -> Any:
    obj = require_object(payload)
    if key not in obj:
        raise DecodeError(f"Missing field {key!r}")
    return obj[key]


def require_str(payload: Any, key: str) -> str:
    value = _require(payload, key)
    if not isinstance(value, str):
        raise DecodeError(f"Field {key!r} should be a string, got {value!r}")
    return value


def optional_str(payload: Any, key: str) -> Optional[str]:
    value = require_object(payload).get(key)
    if value is not None and not isinstance(value, str):
        raise DecodeError(f"Field {key!r} should be a string, got {value!r}")
    return value


def optional_int(payload: Any, key: str) -> Optional[int]:
    value = require_object(payload).get(key)
    if value is not None and (isinstance(value, bool) or not isinstance(value, int)):
        raise DecodeError(f"Field {key!r} should be an integer, got {value!r}")
    return value


def require_int(payload: Any, key: str) -> int:
    value = _require(payload, key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise DecodeError(f"Field {key!r} should be an integer, got {value!r}")
    return value


def require_bool(payload: Any, key: str) -> bool:
    value = _require(payload, key)
    if not isinstance(value, bool):
        raise DecodeError(f"Field {key!r} should be a boolean, got {value!r}")
    return value


def require_list(payload: Any, key: str) -> list:
    value = _require(payload, key)
    if not isinstance(value, list):
        raise DecodeError(f"Field {key!r} should be a list, got {value!r}")
    return value


def decode_records(items: Any, decoder: Callable[[Any], R]) -> Records[R]:
    if not isinstance(items, list):
        raise DecodeError(f"Expected a list result, got {type(items).__name__}")
    return Records(decoder(item) for item in items)


# Records.


def decode_department(obj: Any) -> Department:
    return Department(
        id=require_int(obj, "id"),
        name=require_str(obj, "name"),
        long_name=require_str(obj, "longName"),
    )


def decode_holiday(obj: Any) -> Holiday:
    return Holiday(
        id=require_int(obj, "id"),
        name=require_str(obj, "name"),
        long_name=require_str(obj, "longName"),
        start_date=decode_date(_require(obj, "startDate")),
        end_date=decode_date(_require(obj, "endDate")),
    )


def decode_klasse(obj: Any) -> Klasse:
    return Klasse(
        id=require_int(obj, "id"),
        name=require_str(obj, "name"),
        long_name=require_str(obj, "longName"),
        active=require_bool(obj, "active"),
    )


def decode_room(obj: Any) -> Room:
    return Room(
        id=require_int(obj, "id"),
        name=require_str(obj, "name"),
        long_name=require_str(obj, "longName"),
        active=require_bool(obj, "active"),
        building=require_str(obj, "building"),
    )


def decode_school_year(obj: Any) -> SchoolYear:
    return SchoolYear(
        id=require_int(obj, "id"),
        name=require_str(obj, "name"),
        start_date=decode_date(_require(obj, "startDate")),
        end_date=decode_date(_require(obj, "endDate")),
    )


def decode_subject(obj: Any) -> Subject:
    # Colors are only sent when the school has configured them.
    return Subject(
        id=require_int(obj, "id"),
        name=require_str(obj, "name"),
        long_name=require_str(obj, "longName"),
        active=require_bool(obj, "active"),
        alternate_name=require_str(obj, "alternateName"),
        back_color=optional_str(obj, "backColor"),
        fore_color=optional_str(obj, "foreColor"),
    )


def decode_teacher(obj: Any) -> Teacher:
    return Teacher(
        id=require_int(obj, "id"),
        name=require_str(obj, "name"),
        long_name=require_str(obj, "longName"),
        active=require_bool(obj, "active"),
        title=require_str(obj, "title"),
        fore_name=require_str(obj, "foreName"),
    )


def decode_time_unit(obj: Any) -> TimeUnit:
    return TimeUnit(
        name=optional_str(obj, "name") or "",
        start_time=decode_time(_require(obj, "startTime")),
        end_time=decode_time(_require(obj, "endTime")),
    )


def decode_timegrid_unit(obj: Any) -> TimegridUnit:
    units = require_list(obj, "timeUnits")
    return TimegridUnit(
        day=require_int(obj, "day"),
        time_units=tuple(decode_time_unit(u) for u in units),
    )


def decode_lesson(obj: Any) -> Lesson:
    return Lesson(
        date=decode_date(_require(obj, "date")),
        start_time=decode_time(_require(obj, "startTime")),
        end_time=decode_time(_require(obj, "endTime")),
        klasse_ids=collapse_ids(_require(obj, "kl")),
        teacher_ids=collapse_ids(_require(obj, "te")),
        subject_ids=collapse_ids(_require(obj, "su")),
        room_ids=collapse_ids(_require(obj, "ro")),
        code=decode_optional_enum(require_object(obj), "code", LessonCode),
        activity_type=require_str(obj, "activityType"),
    )


def decode_latest_import_time(value: Any) -> LatestImportTime:
    if isinstance(value, bool) or not isinstance(value, int):
        raise DecodeError(f"Expected an integer timestamp, got {value!r}")
    return LatestImportTime(timestamp=value)
