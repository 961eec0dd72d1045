"""Stub transport and canned server replies for tests."""


class FakeTransport:
    """Returns queued response bodies and records what was posted."""

    def __init__(self, *bodies):
        self.bodies = list(bodies)
        self.posted = []

    def post(self, body, *, session_id=None):
        self.posted.append((body, session_id))
        if not self.bodies:
            raise AssertionError(f"Unexpected call to {body['method']}")
        reply = self.bodies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    @property
    def methods(self):
        return [body["method"] for body, _ in self.posted]


def login_ok(session_id="abc123"):
    return {
        "id": 1,
        "jsonrpc": "2.0",
        "result": {"sessionId": session_id, "personType": 5, "personId": 42, "klasseId": 7},
    }


def ok(result):
    return {"id": 1, "jsonrpc": "2.0", "result": result}


def error(message, code=-8509):
    return {"id": 1, "jsonrpc": "2.0", "error": {"message": message, "code": code}}


