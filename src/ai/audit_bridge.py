"""
GRC AI Assist - Audit Log Bridge
In-process publish/subscribe channel between AI feature call sites and the
session that owns the append-only AI audit trail.

Feature code knows prompt, response and model; the session knows the
authenticated user. The channel is passed to both explicitly.
"""

import threading
import time
from datetime import datetime
from typing import Callable, Iterator, List, Optional, Tuple

from util.logging import logger
from .types import AuditEvent, AuditLogEntry, UserContext

AuditHandler = Callable[[AuditEvent], None]
UserProvider = Callable[[], Optional[UserContext]]

TIMESTAMP_FORMAT = "%m/%d/%Y, %I:%M:%S %p"


class AuditChannel:
    """Fire-and-forget event channel. Events published with no subscriber are lost."""

    def __init__(self):
        self._handlers: List[AuditHandler] = []
        self._lock = threading.Lock()

    def subscribe(self, handler: AuditHandler) -> Callable[[], None]:
        """Attach ``handler``; returns a callable that detaches it."""
        with self._lock:
            self._handlers.append(handler)

        def unsubscribe() -> None:
            with self._lock:
                if handler in self._handlers:
                    self._handlers.remove(handler)

        return unsubscribe

    @property
    def subscriber_count(self) -> int:
        return len(self._handlers)

    def publish(self, module: str, action: str, prompt_text: str, response_text: str, model_id: str) -> None:
        """Dispatch an audit event to current subscribers. Never raises."""
        event = AuditEvent(
            module=module,
            action=action,
            prompt_text=prompt_text,
            response_text=response_text,
            model_id=model_id,
        )

        with self._lock:
            handlers = list(self._handlers)

        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                logger.log_audit_dropped(module, action, f"handler error: {e}")


class AuditLog:
    """
    Append-only, newest-first audit trail held in memory for the process lifetime.

    There is no update or delete operation. Appends are serialized by a lock so
    ids stay unique and ordering matches completion order across threads.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._entries: List[AuditLogEntry] = []
        self._lock = threading.Lock()
        self._clock = clock
        self._last_millis = 0

    def _next_id(self) -> str:
        millis = int(self._clock() * 1000)
        # Same-millisecond appends get the next free value
        if millis <= self._last_millis:
            millis = self._last_millis + 1
        self._last_millis = millis
        return f"LOG-{millis}"

    def append(self, event: AuditEvent, user: UserContext) -> AuditLogEntry:
        """Stamp ``event`` with id, timestamp and user, then prepend it."""
        with self._lock:
            entry = AuditLogEntry(
                id=self._next_id(),
                timestamp=datetime.fromtimestamp(self._last_millis / 1000).strftime(TIMESTAMP_FORMAT),
                user_id=user.user_id,
                user_name=user.user_name,
                module=event.module,
                action=event.action,
                prompt_text=event.prompt_text,
                response_text=event.response_text,
                model_id=event.model_id,
            )
            self._entries.insert(0, entry)

        logger.log_audit_append(entry.id, entry.module, entry.action, entry.user_id)
        return entry

    def entries(self) -> Tuple[AuditLogEntry, ...]:
        """Snapshot of all entries, newest first."""
        with self._lock:
            return tuple(self._entries)

    def search(self, text: str) -> Tuple[AuditLogEntry, ...]:
        """Case-insensitive match against user name, module and action."""
        needle = (text or "").lower()
        return tuple(
            entry for entry in self.entries()
            if needle in entry.user_name.lower()
            or needle in entry.module.lower()
            or needle in entry.action.lower()
        )

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[AuditLogEntry]:
        return iter(self.entries())


class AuditTrailSession:
    """
    The single audit subscriber of an active session.

    Enriches published events with the current user and appends them to the log.
    Events that cannot be enriched (no authenticated user) are dropped silently.
    """

    def __init__(self, channel: AuditChannel, log: AuditLog, user_provider: UserProvider):
        self.channel = channel
        self.log = log
        self._user_provider = user_provider
        self._unsubscribe: Optional[Callable[[], None]] = None

    @property
    def active(self) -> bool:
        return self._unsubscribe is not None

    def start(self) -> "AuditTrailSession":
        if self._unsubscribe is None:
            self._unsubscribe = self.channel.subscribe(self.handle_event)
        return self

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def handle_event(self, event: AuditEvent) -> Optional[AuditLogEntry]:
        try:
            user = self._user_provider()
        except Exception as e:
            logger.log_audit_dropped(event.module, event.action, f"user lookup failed: {e}")
            return None

        if user is None:
            logger.log_audit_dropped(event.module, event.action, "no authenticated user")
            return None

        return self.log.append(event, user)
