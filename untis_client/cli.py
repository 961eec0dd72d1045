"""Command line interface for querying a WebUntis server."""

from __future__ import annotations

import argparse
import dataclasses
import json
import logging
from datetime import date
from enum import Enum
from typing import Any, List

from . import auth, util
from .errors import UntisError
from .models import ElementType
from .session import Session

LISTS = {
    "departments": Session.get_departments,
    "holidays": Session.get_holidays,
    "klassen": Session.get_klassen,
    "rooms": Session.get_rooms,
    "schoolyears": Session.get_school_years,
    "subjects": Session.get_subjects,
    "teachers": Session.get_teachers,
    "timegrid": Session.get_timegrid_units,
}


def parse_args(argv: List[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="WebUntis query tool")
    parser.add_argument(
        "what",
        choices=sorted(LISTS) + ["timetable"],
        help="What to fetch",
    )
    parser.add_argument(
        "--type",
        dest="element_type",
        choices=[t.name.lower() for t in ElementType],
        default="klasse",
        help="Element type for timetables",
    )
    parser.add_argument("--id", dest="element_id", type=int)
    parser.add_argument("--start", help="ISO date, defaults to today")
    parser.add_argument("--end", help="ISO date, defaults to the start date")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args(argv)
    if args.what == "timetable" and args.element_id is None:
        parser.error("--id is required for timetables")
    return args


def _to_json(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.name
    if isinstance(value, (set, frozenset)):
        return sorted(value)
    if hasattr(value, "isoformat"):
        return value.isoformat()
    raise TypeError(f"Cannot serialise {type(value).__name__}")


def fetch(session: Session, args: argparse.Namespace) -> List[Any]:
    if args.what != "timetable":
        return list(LISTS[args.what](session))
    start = date.fromisoformat(args.start) if args.start else util.today()
    end = date.fromisoformat(args.end) if args.end else start
    element_type = ElementType[args.element_type.upper()]
    return list(session.get_timetable(start, end, element_type, args.element_id))


def main(argv: List[str] | None = None) -> None:
    args = parse_args(argv)
    util.configure_logging(args.verbose)
    try:
        credentials = auth.credentials_from_env()
    except RuntimeError as exc:
        logging.error("%s", exc)
        raise SystemExit(1) from exc
    try:
        with Session.login(credentials) as session:
            records = fetch(session, args)
    except UntisError as exc:
        logging.error("%s", exc)
        raise SystemExit(1) from exc
    for record in records:
        print(json.dumps(dataclasses.asdict(record), default=_to_json))


if __name__ == "__main__":  # pragma: no cover
    main()
