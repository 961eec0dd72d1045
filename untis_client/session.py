"""Logged in WebUntis session exposing one method per API operation."""

from __future__ import annotations

import logging
from datetime import date
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional, TypeVar, Union

from . import decoders
from .api import LoginInfo, Method, RequestManager, ResponseEnvelope, TransportClient
from .auth import Credentials, login_params
from .errors import ApiError, LoginFailure, SessionStateError, UntisError
from .models import (
    Department,
    ElementType,
    Holiday,
    Klasse,
    LatestImportTime,
    Lesson,
    Records,
    Room,
    SchoolYear,
    Subject,
    Teacher,
    TimegridUnit,
)
from .util import check_range, date_params

R = TypeVar("R")


class SessionState(Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"
    LOGGED_OUT = "logged_out"


def _authenticate(credentials: Credentials, transport: TransportClient) -> RequestManager:
    manager = RequestManager(transport)
    envelope = manager.call(Method.LOGIN, login_params(credentials))
    if envelope.is_error:
        raise LoginFailure(envelope.error_message or "Login failed", envelope.error_code)
    logging.info("Logged in to %s as %s", credentials.school, credentials.username)
    return manager


class Session:
    """A logged in session.

    Use :meth:`login` to create one. Not safe for concurrent use from several
    threads; give each worker its own session.
    """

    def __init__(
        self,
        credentials: Credentials,
        manager: RequestManager,
        transport: TransportClient,
    ) -> None:
        self.credentials = credentials
        self.transport = transport
        self._manager = manager
        self.state = SessionState.AUTHENTICATED

    @classmethod
    def login(
        cls,
        credentials: Credentials,
        *,
        transport: Optional[TransportClient] = None,
    ) -> "Session":
        transport = transport if transport is not None else TransportClient(credentials)
        manager = _authenticate(credentials, transport)
        return cls(credentials, manager, transport)

    def __enter__(self) -> "Session":
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        if self.state is not SessionState.AUTHENTICATED:
            return
        if exc_type is None:
            self.logout()
            return
        # Keep the error raised inside the block.
        try:
            self.logout()
        except UntisError as logout_exc:
            logging.warning("Logout after error failed: %s", logout_exc)

    @property
    def session_id(self) -> Optional[str]:
        return self._manager.session_id

    @property
    def login_info(self) -> Optional[LoginInfo]:
        return self._manager.login_info

    # Session lifecycle

    def logout(self) -> None:
        """Log out. API errors are ignored, transport errors propagate."""
        envelope = self._manager.call(Method.LOGOUT)
        self.state = SessionState.LOGGED_OUT
        if envelope.is_error:
            logging.warning("Logout failed: %s", envelope.error_message)
        else:
            logging.info("Logged out")

    def refresh(self) -> None:
        """Log out and log in again with the stored credentials.

        The current request manager is only replaced once the new login has
        succeeded. If it fails the session stays logged out and
        :class:`LoginFailure` is raised; calling ``refresh`` again retries.
        """
        if self.state is SessionState.AUTHENTICATED:
            self.logout()
        logging.info("Refreshing session")
        self._manager = _authenticate(self.credentials, self.transport)
        self.state = SessionState.AUTHENTICATED

    # Request plumbing

    def _call(self, method: Method, params: Optional[Mapping[str, Any]] = None) -> Any:
        if self.state is not SessionState.AUTHENTICATED:
            raise SessionStateError(f"Cannot call {method.value}: session is {self.state.value}")
        envelope = self._manager.call(method, params)
        if envelope.is_error:
            raise ApiError(envelope.error_message or "Unknown error", envelope.error_code)
        return envelope.raw_result

    def _fetch_records(
        self,
        method: Method,
        decoder: Callable[[Any], R],
        params: Optional[Mapping[str, Any]] = None,
    ) -> Records[R]:
        return decoders.decode_records(self._call(method, params), decoder)

    # Typed operations

    def get_departments(self) -> Records[Department]:
        return self._fetch_records(Method.GET_DEPARTMENTS, decoders.decode_department)

    def get_holidays(self) -> Records[Holiday]:
        return self._fetch_records(Method.GET_HOLIDAYS, decoders.decode_holiday)

    def get_klassen(self, schoolyear_id: Optional[int] = None) -> Records[Klasse]:
        params = {"schoolyearId": schoolyear_id} if schoolyear_id is not None else None
        return self._fetch_records(Method.GET_KLASSEN, decoders.decode_klasse, params)

    def get_rooms(self) -> Records[Room]:
        return self._fetch_records(Method.GET_ROOMS, decoders.decode_room)

    def get_school_years(self) -> Records[SchoolYear]:
        return self._fetch_records(Method.GET_SCHOOL_YEARS, decoders.decode_school_year)

    def get_current_school_year(self) -> SchoolYear:
        return decoders.decode_school_year(self._call(Method.GET_CURRENT_SCHOOL_YEAR))

    def get_subjects(self) -> Records[Subject]:
        return self._fetch_records(Method.GET_SUBJECTS, decoders.decode_subject)

    def get_teachers(self) -> Records[Teacher]:
        return self._fetch_records(Method.GET_TEACHERS, decoders.decode_teacher)

    def get_timegrid_units(self) -> Records[TimegridUnit]:
        return self._fetch_records(Method.GET_TIMEGRID_UNITS, decoders.decode_timegrid_unit)

    def get_latest_import_time(self) -> LatestImportTime:
        return decoders.decode_latest_import_time(self._call(Method.GET_LATEST_IMPORT_TIME))

    def get_timetable(
        self,
        start: date,
        end: date,
        element_type: ElementType,
        element_id: int,
    ) -> Records[Lesson]:
        check_range(start, end)
        params: Dict[str, Any] = date_params(start, end)
        params["type"] = element_type.value
        params["id"] = element_id
        return self._fetch_records(Method.GET_TIMETABLE, decoders.decode_lesson, params)

    def get_klasse_timetable(self, start: date, end: date, klasse_id: int) -> Records[Lesson]:
        return self.get_timetable(start, end, ElementType.KLASSE, klasse_id)

    def get_teacher_timetable(self, start: date, end: date, teacher_id: int) -> Records[Lesson]:
        return self.get_timetable(start, end, ElementType.TEACHER, teacher_id)

    def get_subject_timetable(self, start: date, end: date, subject_id: int) -> Records[Lesson]:
        return self.get_timetable(start, end, ElementType.SUBJECT, subject_id)

    def get_room_timetable(self, start: date, end: date, room_id: int) -> Records[Lesson]:
        return self.get_timetable(start, end, ElementType.ROOM, room_id)

    def get_student_timetable(self, start: date, end: date, student_id: int) -> Records[Lesson]:
        return self.get_timetable(start, end, ElementType.STUDENT, student_id)

    # Untyped operations, returning the raw result

    def get_status_data(self) -> Any:
        return self._call(Method.GET_STATUS_DATA)

    def get_exam_types(self) -> Any:
        return self._call(Method.GET_EXAM_TYPES)

    def get_exams(self, start: date, end: date, exam_type_id: int) -> Any:
        params: Dict[str, Any] = date_params(start, end)
        params["examTypeId"] = exam_type_id
        return self._call(Method.GET_EXAMS, params)

    def get_class_reg_categories(self) -> Any:
        return self._call(Method.GET_CLASS_REG_CATEGORIES)

    def get_class_reg_category_groups(self) -> Any:
        return self._call(Method.GET_CLASS_REG_CATEGORY_GROUPS)

    def get_class_reg_events(
        self,
        start: date,
        end: date,
        element_type: Optional[ElementType] = None,
        element_id: Optional[int] = None,
    ) -> Any:
        check_range(start, end)
        params: Dict[str, Any] = date_params(start, end)
        if element_type is not None and element_id is not None:
            params["type"] = element_type.value
            params["id"] = element_id
        return self._call(Method.GET_CLASS_REG_EVENTS, params)

    def get_klasse_class_reg_events(self, start: date, end: date, klasse_id: int) -> Any:
        return self.get_class_reg_events(start, end, ElementType.KLASSE, klasse_id)

    def get_teacher_class_reg_events(self, start: date, end: date, teacher_id: int) -> Any:
        return self.get_class_reg_events(start, end, ElementType.TEACHER, teacher_id)

    def get_subject_class_reg_events(self, start: date, end: date, subject_id: int) -> Any:
        return self.get_class_reg_events(start, end, ElementType.SUBJECT, subject_id)

    def get_room_class_reg_events(self, start: date, end: date, room_id: int) -> Any:
        return self.get_class_reg_events(start, end, ElementType.ROOM, room_id)

    def get_student_class_reg_events(self, start: date, end: date, student_id: int) -> Any:
        return self.get_class_reg_events(start, end, ElementType.STUDENT, student_id)

    def get_timetable_with_absence(self, start: date, end: date) -> Any:
        return self._call(Method.GET_TIMETABLE_WITH_ABSENCE, {"options": date_params(start, end)})

    def get_custom_data(
        self,
        method: Union[Method, str],
        params: Optional[Mapping[str, Any]] = None,
    ) -> ResponseEnvelope:
        """Call any method and return the envelope without raising on API errors."""
        if self.state is not SessionState.AUTHENTICATED:
            raise SessionStateError(f"Cannot call {method}: session is {self.state.value}")
        return self._manager.call(method, params)
