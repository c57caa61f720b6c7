"""
HomeStock Backend — Stock Service (Request Orchestrator)
==========================================================

What:  Turns one stock request into: validation → optional image upload →
       persistence → response model.
Why:   Keeps routes thin and puts the upload/persist ordering rules in one
       place, independent of HTTP.
How:   Composes ImageService and a StockRepository built on the request's
       session. Commits explicitly once a write succeeded.
Who:   Called by the /api/v1/stock route handlers.

Orchestration Flow (POST /api/v1/stock):
    ┌──────────┐    ┌─────────────┐    ┌──────────────┐    ┌──────────┐
    │  Fields  │───▶│  Validate   │───▶│  Upload      │───▶│  Insert  │
    │  (Route) │    │  (schema)   │    │  (optional)  │    │  (repo)  │
    └──────────┘    └─────────────┘    └──────────────┘    └──────────┘

    On failure at any step the request fails as a whole. If the insert
    fails after a successful upload, the uploaded image is removed again.

Image cleanup (superseded image on update, image of a deleted item) is a
side effect: failures are logged and never fail the request.
"""

import logging
from typing import Any, List, Mapping, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from homestock.exceptions import DatabaseError, HomeStockError, ImageCleanupError
from homestock.repositories.stock_repository import StockRepository
from homestock.schemas.stock import (
    MessageResponse,
    StockCreate,
    StockResponse,
    StockUpdate,
    parse_fields,
)
from homestock.services.image_service import ImagePayload, ImageService

logger = logging.getLogger(__name__)


class StockService:
    """
    Business logic for the stock resource.

    Stateless apart from the image service it was built with; every call
    receives the request's database session.
    """

    def __init__(self, image_service: ImageService):
        self.image_service = image_service

    async def _commit(self, db: AsyncSession, message: str) -> None:
        try:
            await db.commit()
        except SQLAlchemyError as e:
            logger.error("%s: commit failed: %s", message, str(e))
            raise DatabaseError(message=message, context={"error_type": type(e).__name__})

    async def _cleanup_image(self, url: str) -> None:
        """Best-effort removal of a stored image."""
        try:
            await self.image_service.delete(url)
        except ImageCleanupError as e:
            logger.warning(
                "Could not remove image %s: %s | Context: %s", url, e.detail, e.context
            )

    async def create_stock(
        self,
        db: AsyncSession,
        fields: Mapping[str, Any],
        image: Optional[ImagePayload] = None,
    ) -> StockResponse:
        """
        Create a stock item, uploading its image first when one is supplied.

        Raises:
            ValidationError: invalid fields, unknown user or unacceptable image
            UploadError: media host failure (no record is created)
            DatabaseError: insert failed (the uploaded image is removed again)
        """
        data = parse_fields(StockCreate, fields)

        image_url = await self.image_service.upload(image)
        data.image = image_url

        try:
            item = await StockRepository(db).create(data)
            await self._commit(db, "Error creating stock item")
        except Exception:
            await db.rollback()
            if image_url:
                await self._cleanup_image(image_url)
            raise

        return StockResponse.model_validate(item)

    async def list_stock(self, db: AsyncSession) -> List[StockResponse]:
        """Every stock item with its owner resolved."""
        items = await StockRepository(db).list_all()
        return [StockResponse.model_validate(item) for item in items]

    async def get_stock(self, db: AsyncSession, item_id: str) -> StockResponse:
        """
        Raises:
            NotFoundError: no stock item with this id
        """
        item = await StockRepository(db).get_by_id(item_id)
        return StockResponse.model_validate(item)

    async def update_stock(
        self,
        db: AsyncSession,
        item_id: str,
        fields: Mapping[str, Any],
        image: Optional[ImagePayload] = None,
    ) -> StockResponse:
        """
        Partially update a stock item; a new image replaces the stored one.

        The superseded image is deleted from the media host after the
        update has been committed.

        Raises:
            ValidationError: invalid fields, unknown user or unacceptable image
            NotFoundError: no stock item with this id (checked before uploading)
            UploadError: media host failure (nothing is changed)
            DatabaseError: update failed (the new image is removed again)
        """
        data = parse_fields(StockUpdate, fields)
        repository = StockRepository(db)

        previous_image = (await repository.get_by_id(item_id)).image

        image_url = await self.image_service.upload(image)
        if image_url:
            data.image = image_url

        try:
            item = await repository.update_by_id(item_id, data)
            await self._commit(db, "Error updating stock item")
        except Exception:
            await db.rollback()
            if image_url:
                await self._cleanup_image(image_url)
            raise

        if image_url and previous_image and previous_image != image_url:
            await self._cleanup_image(previous_image)

        return StockResponse.model_validate(item)

    async def delete_stock(self, db: AsyncSession, item_id: str) -> MessageResponse:
        """
        Delete a stock item, then remove its image from the media host.

        Raises:
            NotFoundError: no stock item with this id
            DatabaseError: delete failed (the image is left untouched)
        """
        repository = StockRepository(db)
        item = await repository.get_by_id(item_id)
        image_url = item.image

        try:
            await repository.delete_by_id(item_id)
            await self._commit(db, "Error deleting stock item")
        except HomeStockError:
            await db.rollback()
            raise

        if image_url:
            await self._cleanup_image(image_url)

        return MessageResponse(message="Stock item deleted successfully")
