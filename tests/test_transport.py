import pytest
import requests

from untis_client.api import TransportClient
from untis_client.errors import TransportError


class FakeResponse:
    def __init__(self, payload=None, status_code=200, text=None):
        self.payload = payload
        self.status_code = status_code
        self.text = text

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if self.text is not None:
            raise ValueError("not json")
        return self.payload


class FakeHttp:
    def __init__(self, reply):
        self.reply = reply
        self.headers = {}
        self.calls = []

    def post(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if isinstance(self.reply, Exception):
            raise self.reply
        return self.reply

    def close(self):
        pass


def test_posts_to_school_endpoint(credentials):
    http = FakeHttp(FakeResponse({"result": []}))
    client = TransportClient(credentials, http=http)
    body = {"id": 1, "method": "getRooms", "params": {}, "jsonrpc": "2.0"}
    assert client.post(body, session_id="abc") == {"result": []}
    url, kwargs = http.calls[0]
    assert url == "https://demo.webuntis.com/WebUntis/jsonrpc.do"
    assert kwargs["params"] == {"school": "Demo School"}
    assert kwargs["json"] == body
    assert kwargs["cookies"] == {"JSESSIONID": "abc"}
    assert kwargs["timeout"] == 30
    assert http.headers["User-Agent"] == "untis-client-tests"


def test_no_cookie_without_session(credentials):
    http = FakeHttp(FakeResponse({"result": {}}))
    TransportClient(credentials, http=http).post({})
    assert http.calls[0][1]["cookies"] is None


@pytest.mark.parametrize(
    "reply",
    [
        requests.ConnectionError("refused"),
        FakeResponse(status_code=500),
        FakeResponse(text="<html>"),
        FakeResponse(["not", "an", "object"]),
    ],
)
def test_failures_become_transport_errors(credentials, reply):
    client = TransportClient(credentials, http=FakeHttp(reply))
    with pytest.raises(TransportError):
        client.post({})
