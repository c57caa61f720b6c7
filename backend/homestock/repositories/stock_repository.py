"""
HomeStock Backend — Stock Repository (Persistence Gateway)
============================================================

What:  Single-record CRUD for stock items against the async SQLAlchemy session.
Why:   Keeps every query in one place; services never build SQL.
How:   Works on validated schemas (StockCreate / StockUpdate). Writes are
       flushed, not committed: the service decides when the unit of work ends.

Query plan notes:
    - get_by_id:  primary key lookup; the owner is loaded with selectin
    - list_all:   full scan ordered by added_date, then id (insertion order)
"""

import logging
from typing import Any, Dict, List

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from homestock.exceptions import DatabaseError, NotFoundError, ValidationError
from homestock.models.stock import StockItem
from homestock.models.user import User
from homestock.schemas.stock import StockCreate, StockUpdate

logger = logging.getLogger(__name__)


class StockRepository:
    """
    Persistence gateway for the `stock_items` table.

    Args:
        session: The request's AsyncSession
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _ensure_user_exists(self, user_id: str) -> None:
        """The owner reference must point at a real user row."""
        if await self.session.get(User, user_id) is None:
            raise ValidationError(
                detail=f"user: No user with ID '{user_id}' exists",
                field="user",
                context={"user_id": user_id},
            )

    @staticmethod
    def _columns(values: Dict[str, Any]) -> Dict[str, Any]:
        """Schema field names → column names (`user` is stored as `user_id`)."""
        columns = dict(values)
        if "user" in columns:
            columns["user_id"] = columns.pop("user")
        return columns

    async def create(self, data: StockCreate) -> StockItem:
        """
        Insert a new stock item and return the stored row.

        Raises:
            ValidationError: owner reference does not exist
            DatabaseError: insert failed
        """
        try:
            await self._ensure_user_exists(data.user)
            item = StockItem(**self._columns(data.model_dump()))
            self.session.add(item)
            await self.session.flush()
            logger.info("Stock item created: %s (%s)", item.id, item.name)
            return await self.get_by_id(item.id)
        except SQLAlchemyError as e:
            logger.error("Database error creating stock item: %s", str(e))
            raise DatabaseError(
                message="Error creating stock item",
                context={"error_type": type(e).__name__},
            )

    async def list_all(self) -> List[StockItem]:
        """Every stock item, owners resolved, in insertion order."""
        try:
            result = await self.session.execute(
                select(StockItem).order_by(StockItem.added_date, StockItem.id)
            )
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing stock: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Error fetching stock",
                context={"error_type": type(e).__name__},
            )

    async def get_by_id(self, item_id: str) -> StockItem:
        """
        Fetch one stock item with its owner.

        Raises:
            NotFoundError: no row with this id
            DatabaseError: query failed
        """
        try:
            # populate_existing: refresh an instance already in the identity
            # map (after create/update) including its owner relationship
            result = await self.session.execute(
                select(StockItem)
                .where(StockItem.id == item_id)
                .execution_options(populate_existing=True)
            )
            item = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching stock item %s: %s", item_id, str(e))
            raise DatabaseError(
                message="Error fetching stock item",
                context={"item_id": item_id},
            )

        if item is None:
            raise NotFoundError(resource="stock item", resource_id=item_id)
        return item

    async def update_by_id(self, item_id: str, data: StockUpdate) -> StockItem:
        """
        Apply only the fields the client supplied (partial merge).

        Raises:
            NotFoundError: no row with this id
            ValidationError: a new owner reference does not exist
            DatabaseError: update failed
        """
        item = await self.get_by_id(item_id)
        changes = self._columns(data.changes())

        try:
            if "user_id" in changes and changes["user_id"] != item.user_id:
                await self._ensure_user_exists(changes["user_id"])
            for column, value in changes.items():
                setattr(item, column, value)
            await self.session.flush()
            if "user_id" in changes:
                # owner relationship still points at the previous user
                self.session.expire(item, ["user"])
        except SQLAlchemyError as e:
            logger.error("Database error updating stock item %s: %s", item_id, str(e))
            raise DatabaseError(
                message="Error updating stock item",
                context={"item_id": item_id, "error_type": type(e).__name__},
            )

        logger.info("Stock item %s updated: %s", item_id, sorted(changes))
        return await self.get_by_id(item_id)

    async def delete_by_id(self, item_id: str) -> None:
        """
        Remove a stock item permanently.

        Raises:
            NotFoundError: no row with this id
            DatabaseError: delete failed
        """
        item = await self.get_by_id(item_id)
        try:
            await self.session.delete(item)
            await self.session.flush()
        except SQLAlchemyError as e:
            logger.error("Database error deleting stock item %s: %s", item_id, str(e))
            raise DatabaseError(
                message="Error deleting stock item",
                context={"item_id": item_id},
            )
        logger.info("Stock item deleted: %s", item_id)
