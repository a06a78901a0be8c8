"""
Option Service

Durable key/value storage on top of the ``options`` table. Used directly by
the ``option`` proxy target and as the persistence layer for the route and
discovery tables.
"""

import logging
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from exposer.models.option import Option

logger = logging.getLogger(__name__)


class OptionService:
    """Get/set/delete JSON values by option name."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get_row(self, name: str) -> Option | None:
        result = await self.db.execute(select(Option).where(Option.name == name))
        return result.scalar_one_or_none()

    async def exists(self, name: str) -> bool:
        return await self._get_row(name) is not None

    async def get(self, name: str, default: Any = None) -> Any:
        """Return the stored value, or ``default`` when the option is unset."""
        row = await self._get_row(name)
        if row is None:
            return default
        return row.value

    async def set(self, name: str, value: Any, autoload: bool = True) -> None:
        """Insert or replace the value of an option."""
        row = await self._get_row(name)
        if row is None:
            self.db.add(Option(name=name, value=value, autoload=autoload))
        else:
            row.value = value
        await self.db.commit()
        logger.debug(f"Option saved: {name}")

    async def delete(self, name: str) -> bool:
        """Delete an option. Returns False when it did not exist."""
        result = await self.db.execute(delete(Option).where(Option.name == name))
        await self.db.commit()
        deleted = result.rowcount > 0
        if deleted:
            logger.debug(f"Option deleted: {name}")
        return deleted
