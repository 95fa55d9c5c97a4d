"""
In-process change feed over row-level mutations.

Writers never talk to the feed directly:
- A SQLAlchemy ``after_flush`` listener snapshots every inserted, updated and
  deleted row into ``session.info``.
- ``after_commit`` promotes them; ``Store.commit`` publishes them once the
  commit returned, outside the transaction.

Subscribers register for a table, an event mask and an optional
``(column, value)`` filter. Delivery happens synchronously in the publisher's
context. A notification only says "this row now looks like this"; consumers
replace or refetch their state rather than applying it as a delta.
"""

from __future__ import annotations

import itertools
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Optional

from sqlalchemy import event, inspect
from sqlalchemy.orm import Session

INSERT = "INSERT"
UPDATE = "UPDATE"
DELETE = "DELETE"
ALL_EVENTS = frozenset({INSERT, UPDATE, DELETE})

PENDING_CHANGES_KEY = "partywatch.pending_changes"
COMMITTED_CHANGES_KEY = "partywatch.committed_changes"

_subscription_ids = itertools.count(1)


@dataclass(frozen=True)
class ChangeEvent:
    table: str
    event_type: str
    new: dict = field(default_factory=dict)
    old: Optional[dict] = None

    def column(self, name: str) -> Any:
        row = self.new if self.event_type != DELETE else (self.old or {})
        return row.get(name)


@dataclass(eq=False)
class Subscription:
    table: str
    events: frozenset
    callback: Callable[[ChangeEvent], None]
    column_filter: Optional[tuple[str, Any]] = None
    id: int = field(default_factory=lambda: next(_subscription_ids))
    active: bool = True

    def matches(self, change: ChangeEvent) -> bool:
        if change.table != self.table or change.event_type not in self.events:
            return False
        if self.column_filter is None:
            return True
        column, value = self.column_filter
        return change.column(column) == value


class ChangeFeed:
    def __init__(self) -> None:
        self._subscriptions: dict[int, Subscription] = {}
        self._lock = threading.Lock()

    def subscribe(
        self,
        table: str,
        events: Iterable[str],
        callback: Callable[[ChangeEvent], None],
        column_filter: Optional[tuple[str, Any]] = None,
    ) -> Subscription:
        events = frozenset(e.upper() for e in events) or ALL_EVENTS
        if "*" in events:
            events = ALL_EVENTS
        subscription = Subscription(
            table=table,
            events=events,
            callback=callback,
            column_filter=column_filter,
        )
        with self._lock:
            self._subscriptions[subscription.id] = subscription
        logging.debug(
            "change_feed: subscribed id=%s table=%s events=%s filter=%s",
            subscription.id,
            table,
            sorted(events),
            column_filter,
        )
        return subscription

    def unsubscribe(self, subscription: Optional[Subscription]) -> None:
        # Releasing twice, or releasing a handle the feed already dropped, is a no-op
        if subscription is None:
            return
        subscription.active = False
        with self._lock:
            self._subscriptions.pop(subscription.id, None)

    def clear(self) -> None:
        with self._lock:
            subscriptions = list(self._subscriptions.values())
            self._subscriptions.clear()
        for subscription in subscriptions:
            subscription.active = False

    def subscriber_count(self, table: Optional[str] = None) -> int:
        with self._lock:
            if table is None:
                return len(self._subscriptions)
            return sum(1 for s in self._subscriptions.values() if s.table == table)

    def publish(self, change: ChangeEvent) -> int:
        """Deliver ``change`` to every matching live subscription; returns deliveries."""
        with self._lock:
            targets = [s for s in self._subscriptions.values() if s.matches(change)]
        delivered = 0
        for subscription in targets:
            # A callback run earlier in this loop may have released this handle
            if not subscription.active:
                continue
            try:
                subscription.callback(change)
                delivered += 1
            except Exception:
                logging.exception(
                    "change_feed: subscriber %s failed on %s %s",
                    subscription.id,
                    change.event_type,
                    change.table,
                )
        return delivered

    def publish_all(self, changes: Iterable[ChangeEvent]) -> None:
        for change in changes:
            self.publish(change)


def row_image(obj: Any) -> dict:
    """Column values of a mapped object keyed by column name."""
    state = inspect(obj)
    return {
        attr.columns[0].name: getattr(obj, attr.key)
        for attr in state.mapper.column_attrs
    }


def _committed_image(obj: Any) -> dict:
    state = inspect(obj)
    image = {}
    for attr in state.mapper.column_attrs:
        history = state.attrs[attr.key].history
        if history.deleted:
            image[attr.columns[0].name] = history.deleted[0]
        elif history.unchanged:
            image[attr.columns[0].name] = history.unchanged[0]
        elif history.added:
            # Changed from an unset/NULL value
            image[attr.columns[0].name] = None
    return image


def _collect_changes(session: Session, flush_context) -> None:
    pending = session.info.setdefault(PENDING_CHANGES_KEY, [])
    for obj in session.new:
        pending.append(ChangeEvent(obj.__table__.name, INSERT, row_image(obj)))
    for obj in session.dirty:
        if not session.is_modified(obj, include_collections=False):
            continue
        pending.append(
            ChangeEvent(obj.__table__.name, UPDATE, row_image(obj), _committed_image(obj))
        )
    for obj in session.deleted:
        pending.append(ChangeEvent(obj.__table__.name, DELETE, {}, row_image(obj)))


def _promote_changes(session: Session) -> None:
    pending = session.info.pop(PENDING_CHANGES_KEY, None)
    if pending:
        session.info.setdefault(COMMITTED_CHANGES_KEY, []).extend(pending)


def _discard_pending(session: Session, transaction) -> None:
    # Anything still pending when the outermost transaction ends was rolled back
    if transaction.parent is None:
        session.info.pop(PENDING_CHANGES_KEY, None)


def take_committed_changes(session) -> list[ChangeEvent]:
    return session.info.pop(COMMITTED_CHANGES_KEY, None) or []


# Registered once for every Session in the process
event.listen(Session, "after_flush", _collect_changes)
event.listen(Session, "after_commit", _promote_changes)
event.listen(Session, "after_transaction_end", _discard_pending)
