"""
Single-relay publish session.

One RelaySession owns one WebSocket to one relay and drives the NIP-01
publish exchange:

    -> ["EVENT", <event>]
    <- ["OK", <event id>, <accepted>, <message>]

Frames for other event ids, other frame types and undecodable frames are
skipped while waiting for the acknowledgment. Connect and the whole
send-and-acknowledge exchange are each bounded by one watchdog timer that
shuts the socket down when it fires.
"""

import enum
import json
import logging
import socket
import ssl
import threading
import time
from contextlib import contextmanager
from typing import Callable, Optional

import websocket

import config

logger = logging.getLogger(__name__)


class SessionState(enum.Enum):
    IDLE = "idle"
    CONNECTING = "connecting"
    OPEN = "open"
    PUBLISHING = "publishing"
    CLOSED = "closed"
    FAILED = "failed"


class RelayError(Exception):
    """Base class for per-relay failures."""


class ConnectError(RelayError):
    """Relay refused or broke the connection."""


class ConnectTimeoutError(ConnectError):
    pass


class NotConnectedError(RelayError):
    """publish() called without an open connection."""


class PublishError(RelayError):
    """Event could not be delivered or acknowledged."""


class PublishTimeoutError(PublishError):
    pass


class PublishRejectedError(PublishError):
    """Relay answered OK with accepted=false."""


def new_websocket(verify_ssl: bool = True) -> websocket.WebSocket:
    """Create an unconnected websocket-client socket."""
    sslopt = {} if verify_ssl else {"cert_reqs": ssl.CERT_NONE}
    return websocket.WebSocket(sslopt=sslopt)


def parse_ok_frame(raw, event_id: str) -> Optional[tuple[bool, str]]:
    """
    Return (accepted, message) if raw is ["OK", event_id, accepted, message].
    Anything else (other id, other frame type, bad JSON) returns None.
    """
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = raw.decode()
        except UnicodeDecodeError:
            logger.debug("Dropping undecodable binary frame")
            return None
    try:
        frame = json.loads(raw)
    except (TypeError, ValueError):
        logger.debug("Dropping malformed frame: %.80r", raw)
        return None
    if not isinstance(frame, list) or len(frame) < 3 or frame[0] != "OK":
        if isinstance(frame, list) and frame and frame[0] == "NOTICE":
            logger.info("Relay notice: %s", frame[1] if len(frame) > 1 else "")
        return None
    if frame[1] != event_id:
        logger.debug("Ignoring OK for other event %s", str(frame[1])[:16])
        return None
    message = frame[3] if len(frame) > 3 and isinstance(frame[3], str) else ""
    return frame[2] is True, message


class RelaySession:
    """
    Connection to one relay for one publish attempt.

    Usage:
        with RelaySession("wss://nos.lol") as session:
            session.connect()
            message = session.publish(signed_event)
    """

    def __init__(
        self,
        url: str,
        connect_timeout: Optional[float] = None,
        publish_timeout: Optional[float] = None,
        verify_ssl: Optional[bool] = None,
        ws_factory: Optional[Callable[[], websocket.WebSocket]] = None,
    ):
        self.url = url
        self.connect_timeout = config.RELAY_CONNECT_TIMEOUT if connect_timeout is None else connect_timeout
        self.publish_timeout = config.RELAY_PUBLISH_TIMEOUT if publish_timeout is None else publish_timeout
        if verify_ssl is None:
            verify_ssl = config.RELAY_VERIFY_SSL
        self._ws_factory = ws_factory or (lambda: new_websocket(verify_ssl))
        self._ws: Optional[websocket.WebSocket] = None
        self.state = SessionState.IDLE

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def __repr__(self):
        return f"<RelaySession {self.url} {self.state.value}>"

    @contextmanager
    def _watchdog(self, timeout: float):
        """
        Yields a threading.Event that is set if `timeout` elapses before the
        block exits. On expiry the socket is shut down so any blocking
        connect/send/recv in the block fails immediately.
        """
        expired = threading.Event()
        ws = self._ws

        def expire():
            expired.set()
            logger.debug("Watchdog fired for %s after %ss", self.url, timeout)
            _interrupt(ws)

        timer = threading.Timer(max(timeout, 0), expire)
        timer.daemon = True
        timer.start()
        try:
            yield expired
        finally:
            timer.cancel()

    def connect(self) -> None:
        """Open the WebSocket. Raises ConnectError or ConnectTimeoutError."""
        if self.state is not SessionState.IDLE:
            raise ConnectError(f"Session already used (state={self.state.value})")
        self.state = SessionState.CONNECTING
        self._ws = self._ws_factory()
        error = None
        with self._watchdog(self.connect_timeout) as expired:
            try:
                self._ws.connect(self.url, timeout=self.connect_timeout)
            except Exception as e:
                error = e

        if expired.is_set() or isinstance(error, (websocket.WebSocketTimeoutException, socket.timeout)):
            logger.warning("Connection to %s timed out after %ss", self.url, self.connect_timeout)
            self._abort()
            self.state = SessionState.FAILED
            raise ConnectTimeoutError("Connection timeout") from error
        if error is not None:
            logger.warning("Connection error to %s: %s", self.url, error)
            self._abort()
            self.state = SessionState.FAILED
            raise ConnectError(f"Connection error: {error}") from error
        self.state = SessionState.OPEN
        logger.info("Connected to %s", self.url)

    def publish(self, event: dict) -> str:
        """
        Send the event and wait for its OK frame.
        Returns the relay's message when accepted.
        """
        if self.state is not SessionState.OPEN or self._ws is None:
            raise NotConnectedError("WebSocket not connected")
        self.state = SessionState.PUBLISHING
        event_id = event["id"]
        with self._watchdog(self.publish_timeout) as expired:
            try:
                self._ws.send(json.dumps(["EVENT", event]))
            except Exception as e:
                self.state = SessionState.FAILED
                if expired.is_set():
                    raise PublishTimeoutError("Publish timeout") from e
                raise PublishError(f"Send failed: {e}") from e
            accepted, message = self._wait_for_ok(event_id, expired)

        if not accepted:
            self.state = SessionState.FAILED
            raise PublishRejectedError(message or "Publish failed")
        self.state = SessionState.OPEN
        return message or "Published successfully"

    def _wait_for_ok(self, event_id: str, expired: threading.Event) -> tuple[bool, str]:
        deadline = time.monotonic() + self.publish_timeout
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0 or expired.is_set():
                self.state = SessionState.FAILED
                raise PublishTimeoutError("Publish timeout")
            self._ws.settimeout(remaining)
            try:
                raw = self._ws.recv()
            except Exception as e:
                self.state = SessionState.FAILED
                if expired.is_set() or isinstance(e, websocket.WebSocketTimeoutException):
                    raise PublishTimeoutError("Publish timeout") from e
                raise PublishError(f"Connection closed before acknowledgment: {e}") from e
            if not raw and not self._ws.connected:
                self.state = SessionState.FAILED
                if expired.is_set():
                    raise PublishTimeoutError("Publish timeout")
                raise PublishError("Connection closed before acknowledgment")
            result = parse_ok_frame(raw, event_id)
            if result is not None:
                return result

    def close(self) -> None:
        """Release the connection. Safe to call any number of times."""
        if self._ws is not None:
            ws, self._ws = self._ws, None
            try:
                ws.close(timeout=1)
            except Exception as e:
                logger.debug("Error closing %s: %s", self.url, e)
            else:
                logger.info("Disconnected from %s", self.url)
        self.state = SessionState.CLOSED

    def _abort(self) -> None:
        # Drop a half-open socket without the closing handshake
        if self._ws is None:
            return
        ws, self._ws = self._ws, None
        try:
            ws.abort()
            ws.shutdown()
        except Exception as e:
            logger.debug("Error aborting %s: %s", self.url, e)


def _interrupt(ws) -> None:
    # Called from the watchdog thread; shutting the raw socket down wakes a
    # blocked handshake or recv. ws.abort() only acts once the handshake is done.
    if ws is None:
        return
    try:
        sock = getattr(ws, "sock", None)
        if sock is not None:
            sock.shutdown(socket.SHUT_RDWR)
        else:
            ws.abort()
    except Exception as e:
        logger.debug("Error interrupting socket: %s", e)
