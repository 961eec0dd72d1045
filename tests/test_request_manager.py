import pytest

from fakes import FakeTransport, error, login_ok, ok
from untis_client.api import Method, RequestManager, ResponseEnvelope, classify
from untis_client.errors import DecodeError, TransportError


def test_success_envelope():
    manager = RequestManager(FakeTransport(ok({"x": 1})))
    envelope = manager.call(Method.GET_ROOMS)
    assert envelope == ResponseEnvelope(is_error=False, raw_result={"x": 1})


def test_error_envelope_does_not_raise():
    manager = RequestManager(FakeTransport({"error": {"message": "no rights"}}))
    envelope = manager.call(Method.GET_ROOMS)
    assert envelope.is_error
    assert envelope.error_message == "no rights"
    assert envelope.raw_result is None


def test_error_code_is_kept():
    assert classify(error("not authenticated", -8520)).error_code == -8520


def test_request_body_shape():
    transport = FakeTransport(ok([]), ok([]))
    manager = RequestManager(transport)
    manager.call(Method.GET_KLASSEN, {"schoolyearId": 3})
    manager.call("getSomethingElse")
    first, second = (body for body, _ in transport.posted)
    assert first == {
        "id": 1,
        "method": "getKlassen",
        "params": {"schoolyearId": 3},
        "jsonrpc": "2.0",
    }
    assert second["id"] == 2
    assert second["method"] == "getSomethingElse"
    assert second["params"] == {}


def test_login_stores_session_token():
    transport = FakeTransport(login_ok("token-1"), ok([]))
    manager = RequestManager(transport)
    assert manager.session_id is None
    manager.call(Method.LOGIN, {"user": "u", "password": "p", "client": ""})
    manager.call(Method.GET_ROOMS)
    assert manager.session_id == "token-1"
    assert manager.login_info.person_id == 42
    assert transport.posted[0][1] is None
    assert transport.posted[1][1] == "token-1"


def test_failed_login_leaves_token_unset():
    manager = RequestManager(FakeTransport(error("bad credentials")))
    assert manager.call(Method.LOGIN).is_error
    assert manager.session_id is None


def test_other_calls_do_not_touch_token():
    manager = RequestManager(FakeTransport(ok({"sessionId": "other"})))
    manager.call(Method.GET_CURRENT_SCHOOL_YEAR)
    assert manager.session_id is None


def test_login_without_session_id():
    manager = RequestManager(FakeTransport(ok({})))
    with pytest.raises(DecodeError):
        manager.call(Method.LOGIN)


def test_transport_error_propagates():
    transport = FakeTransport(TransportError("boom"))
    with pytest.raises(TransportError):
        RequestManager(transport).call(Method.GET_ROOMS)
    assert len(transport.posted) == 1


def test_null_error_member_is_success():
    envelope = classify({"id": 1, "result": [1], "error": None})
    assert not envelope.is_error
    assert envelope.raw_result == [1]


def test_login_info_fields_must_be_integers():
    reply = login_ok()
    reply["result"]["personId"] = "42"
    manager = RequestManager(FakeTransport(reply))
    with pytest.raises(DecodeError, match="personId"):
        manager.call(Method.LOGIN)
    assert manager.session_id is None


def test_login_info_fields_are_optional():
    manager = RequestManager(FakeTransport(ok({"sessionId": "t"})))
    manager.call(Method.LOGIN)
    assert manager.login_info.person_id is None
