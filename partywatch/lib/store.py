from __future__ import annotations

import logging
from typing import Any, Optional, Type, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..errors import ConflictError, TransportError
from .change_feed import ChangeFeed, take_committed_changes

T = TypeVar("T")


class Store:
    """Store capability handed to every component at construction.

    Wraps a SQLAlchemy session and the change feed the session's commits are
    published to. Components never import the global session themselves, so a
    test can hand them any session/feed pair.
    """

    def __init__(self, session, feed: ChangeFeed) -> None:
        self.session = session
        self.feed = feed

    def query(self, *entities):
        return self.session.query(*entities)

    def get(self, model: Type[T], ident: Any) -> Optional[T]:
        if ident is None:
            return None
        try:
            return self.session.get(model, ident)
        except SQLAlchemyError as e:
            self.rollback()
            raise TransportError(f"store read failed: {e}") from e

    def add(self, obj: Any) -> Any:
        self.session.add(obj)
        return obj

    def flush(self) -> None:
        try:
            self.session.flush()
        except IntegrityError as e:
            self.rollback()
            raise ConflictError(str(e.orig)) from e
        except SQLAlchemyError as e:
            self.rollback()
            logging.exception("store flush failed")
            raise TransportError("store flush failed") from e

    def commit(self) -> None:
        """Commit, then publish the captured row changes to the feed."""
        try:
            self.session.commit()
        except IntegrityError as e:
            self.rollback()
            raise ConflictError(str(e.orig)) from e
        except SQLAlchemyError as e:
            self.rollback()
            logging.exception("store commit failed")
            raise TransportError("store commit failed") from e
        self.feed.publish_all(take_committed_changes(self.session))

    def rollback(self) -> None:
        try:
            self.session.rollback()
        except SQLAlchemyError:
            logging.exception("store rollback failed")
