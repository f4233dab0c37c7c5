"""Notification outbox — one row per event, rendered and delivered elsewhere.

Each notify() runs in its own short session so a failed insert never
touches the settlement transaction; failures are logged, not raised.
"""

import json
import logging
from typing import Any

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

logger = logging.getLogger(__name__)

_INSERT_NOTIFICATION_SQL = text("""
    INSERT INTO notifications (recipient_id, kind, context)
    VALUES (:recipient_id, :kind, CAST(:context AS JSONB))
""")


class SqlNotifier:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def notify(self, recipient_id: str, kind: str, context: dict[str, Any]) -> None:
        try:
            async with self._session_factory() as db:
                await db.execute(
                    _INSERT_NOTIFICATION_SQL,
                    {
                        "recipient_id": recipient_id,
                        "kind": kind,
                        "context": json.dumps(context, default=str),
                    },
                )
                await db.commit()
        except SQLAlchemyError:
            logger.exception("Failed to queue %s notification for %s", kind, recipient_id)
