# portal/services/datastore.py
"""Capability-checked access to the optional relational datastore.

Handlers never ask "is a database configured?" themselves. They hand a
callable to :data:`datastore` and get back either ``Available(value)`` or
``Unavailable(reason)``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Union

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from portal import db

logger = logging.getLogger(__name__)

NOT_CONFIGURED = "not_configured"


@dataclass(frozen=True)
class Available:
    value: Any
    available = True


@dataclass(frozen=True)
class Unavailable:
    reason: str = NOT_CONFIGURED
    available = False


DatastoreResult = Union[Available, Unavailable]


class Datastore:
    def is_configured(self) -> bool:
        return "sqlalchemy" in current_app.extensions

    def read(self, fn: Callable[[Any], Any]) -> DatastoreResult:
        if not self.is_configured():
            return Unavailable()
        return Available(fn(db.session))

    def write(self, fn: Callable[[Any], Any]) -> DatastoreResult:
        """Run ``fn(session)`` and commit; roll back and re-raise on failure."""
        if not self.is_configured():
            return Unavailable()
        try:
            value = fn(db.session)
            db.session.commit()
        except SQLAlchemyError:
            logger.error("Datastore write failed, rolling back", exc_info=True)
            db.session.rollback()
            raise
        return Available(value)


datastore = Datastore()
