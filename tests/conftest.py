"""Test configuration and utilities."""

import json

import pytest
import websocket

from nostr_utils import build_note_template, load_private_key, sign_event

TEST_SECRET_HEX = "7f7ff03d123792d6ac594bfa67bf6d0c0ab55b6b1fdb6249303fe861f1ccba9a"


class FakeWebSocket:
    """
    Scripted stand-in for websocket.WebSocket.

    connect_error: exception raised by connect()
    frames: items returned by recv() in order; an Exception instance is raised
            instead of returned. Once exhausted recv() times out.
    """

    def __init__(self, connect_error=None, frames=None, send_error=None):
        self.connect_error = connect_error
        self.frames = list(frames or [])
        self.send_error = send_error
        self.connected = False
        self.sent = []
        self.timeouts = []
        self.connect_calls = []
        self.closed = False
        self.aborted = False

    def connect(self, url, **options):
        self.connect_calls.append((url, options))
        if self.connect_error is not None:
            raise self.connect_error
        self.connected = True

    def send(self, payload):
        if self.send_error is not None:
            raise self.send_error
        self.sent.append(payload)

    def settimeout(self, timeout):
        self.timeouts.append(timeout)

    def recv(self):
        if not self.frames:
            raise websocket.WebSocketTimeoutException("timed out")
        item = self.frames.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def close(self, status=None, reason=b"", timeout=3):
        self.closed = True
        self.connected = False

    def abort(self):
        self.aborted = True

    def shutdown(self):
        self.connected = False


def ok_frame(event_id, accepted=True, message=""):
    return json.dumps(["OK", event_id, accepted, message])


@pytest.fixture
def private_key():
    return load_private_key(TEST_SECRET_HEX)


@pytest.fixture
def signed_event(private_key):
    template = build_note_template("Lead by example. Take your neighbors with you!", created_at=1700000000)
    return sign_event(template, private_key)
