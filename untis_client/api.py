"""JSON-RPC transport and request handling for WebUntis."""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union

import requests

from .auth import Credentials
from .decoders import optional_int
from .errors import DecodeError, TransportError

ENDPOINT_PATH = "/WebUntis/jsonrpc.do"
SESSION_COOKIE = "JSESSIONID"


class Method(str, Enum):
    """Wire method names understood by the server."""

    LOGIN = "authenticate"
    LOGOUT = "logout"
    GET_CLASS_REG_CATEGORIES = "getClassregCategories"
    GET_CLASS_REG_CATEGORY_GROUPS = "getClassregCategoryGroups"
    GET_CLASS_REG_EVENTS = "getClassregEvents"
    GET_CURRENT_SCHOOL_YEAR = "getCurrentSchoolyear"
    GET_DEPARTMENTS = "getDepartments"
    GET_EXAMS = "getExams"
    GET_EXAM_TYPES = "getExamTypes"
    GET_HOLIDAYS = "getHolidays"
    GET_KLASSEN = "getKlassen"
    GET_LATEST_IMPORT_TIME = "getLatestImportTime"
    GET_ROOMS = "getRooms"
    GET_SCHOOL_YEARS = "getSchoolyears"
    GET_STATUS_DATA = "getStatusData"
    GET_SUBJECTS = "getSubjects"
    GET_TEACHERS = "getTeachers"
    GET_TIMEGRID_UNITS = "getTimegridUnits"
    GET_TIMETABLE = "getTimetable"
    GET_TIMETABLE_WITH_ABSENCE = "getTimetableWithAbsences"


@dataclass(frozen=True)
class ResponseEnvelope:
    is_error: bool
    error_message: Optional[str] = None
    error_code: Optional[int] = None
    raw_result: Any = None

    @classmethod
    def success(cls, result: Any) -> "ResponseEnvelope":
        return cls(is_error=False, raw_result=result)

    @classmethod
    def failure(cls, message: str, code: Optional[int] = None) -> "ResponseEnvelope":
        return cls(is_error=True, error_message=message, error_code=code)


@dataclass(frozen=True)
class LoginInfo:
    """What the server tells us about the logged in person."""

    person_type: Optional[int] = None
    person_id: Optional[int] = None
    klasse_id: Optional[int] = None


class TransportClient:
    """Posts JSON-RPC bodies to one school's endpoint."""

    def __init__(
        self,
        credentials: Credentials,
        *,
        path: str = ENDPOINT_PATH,
        timeout: float = 30,
        http: Optional[requests.Session] = None,
    ) -> None:
        self.url = f"https://{credentials.server}{path}"
        self.school = credentials.school
        self.timeout = timeout
        self.http = http if http is not None else requests.Session()
        if credentials.user_agent:
            self.http.headers["User-Agent"] = credentials.user_agent

    def post(self, body: Mapping[str, Any], *, session_id: Optional[str] = None) -> Dict[str, Any]:
        cookies = {SESSION_COOKIE: session_id} if session_id else None
        try:
            resp = self.http.post(
                self.url,
                params={"school": self.school},
                json=body,
                cookies=cookies,
                timeout=self.timeout,
            )
            resp.raise_for_status()
            data = resp.json()
        except requests.RequestException as exc:
            raise TransportError(f"Request to {self.url} failed: {exc}") from exc
        except ValueError as exc:
            raise TransportError(f"Response from {self.url} is not JSON") from exc
        if not isinstance(data, dict):
            raise TransportError(f"Response from {self.url} is not a JSON object")
        return data

    def close(self) -> None:
        self.http.close()


def _method_name(method: Union[Method, str]) -> str:
    return method.value if isinstance(method, Method) else method


def classify(body: Mapping[str, Any]) -> ResponseEnvelope:
    """Turn a JSON-RPC response body into an envelope without raising."""
    if body.get("error") is not None:
        error = body["error"]
        if isinstance(error, Mapping):
            message = error.get("message")
            code = error.get("code")
        else:
            message, code = error, None
        return ResponseEnvelope.failure(
            str(message) if message is not None else "Unknown error",
            code if isinstance(code, int) and not isinstance(code, bool) else None,
        )
    return ResponseEnvelope.success(body.get("result"))


class RequestManager:
    """Owns the session token and issues JSON-RPC calls."""

    def __init__(self, transport: TransportClient) -> None:
        self.transport = transport
        self.session_id: Optional[str] = None
        self.login_info: Optional[LoginInfo] = None
        self._ids = itertools.count(1)

    def call(
        self,
        method: Union[Method, str],
        params: Optional[Mapping[str, Any]] = None,
    ) -> ResponseEnvelope:
        name = _method_name(method)
        request_id = next(self._ids)
        body = {
            "id": request_id,
            "method": name,
            "params": dict(params) if params else {},
            "jsonrpc": "2.0",
        }
        logging.debug("RPC %s (id=%s)", name, request_id)
        envelope = classify(self.transport.post(body, session_id=self.session_id))
        if envelope.is_error:
            logging.debug("RPC %s failed: %s", name, envelope.error_message)
        elif name == Method.LOGIN.value:
            self._store_login(envelope.raw_result)
        return envelope

    def _store_login(self, result: Any) -> None:
        session_id = result.get("sessionId") if isinstance(result, Mapping) else None
        if not isinstance(session_id, str) or not session_id:
            raise DecodeError("Login result carries no sessionId")
        login_info = LoginInfo(
            person_type=optional_int(result, "personType"),
            person_id=optional_int(result, "personId"),
            klasse_id=optional_int(result, "klasseId"),
        )
        self.session_id = session_id
        self.login_info = login_info
