"""
HomeStock Backend — Stock Route Handlers
==========================================

What:  The five /api/v1/stock endpoints (list, create, fetch, update, delete).
Why:   Entry point for every stock operation from the frontend.
How:   Extracts form fields and the optional `image` file, delegates to
       StockService, returns JSON. Errors are raised as application
       exceptions and formatted by the global handlers in main.py.

Route Inventory:
    GET    /api/v1/stock          → 200 list of stock items
    POST   /api/v1/stock          → 201 created stock item (multipart)
    GET    /api/v1/stock/{id}     → 200 stock item | 404
    PATCH  /api/v1/stock/{id}     → 200 updated stock item | 404 (multipart)
    DELETE /api/v1/stock/{id}     → 200 confirmation | 404
"""

import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from homestock.database import get_db_session
from homestock.exceptions import ValidationError
from homestock.schemas.stock import ErrorResponse, MessageResponse, StockResponse
from homestock.services.image_service import ImagePayload, ImageService, get_image_service
from homestock.services.stock_service import StockService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/stock", tags=["Stock"])

_ERRORS = {
    400: {"description": "Invalid fields or image", "model": ErrorResponse},
    500: {"description": "Server, database or image host error", "model": ErrorResponse},
}
_NOT_FOUND = {404: {"description": "Stock item not found", "model": ErrorResponse}}


def get_stock_service(
    image_service: ImageService = Depends(get_image_service),
) -> StockService:
    return StockService(image_service)


async def stock_form_fields(
    name: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    quantity: Optional[str] = Form(None),
    unit: Optional[str] = Form(None),
    expiration_date: Optional[str] = Form(None, alias="expirationDate"),
    expiration_date_snake: Optional[str] = Form(None, alias="expiration_date"),
    notes: Optional[str] = Form(None),
    user: Optional[str] = Form(None),
) -> Dict[str, str]:
    """
    Collect the stock fields present in a multipart/urlencoded body.

    Fields arrive as strings; type and enum checks happen in StockService so
    that every validation failure has the same error format. Absent fields
    are left out, which is what makes PATCH a partial update.

    The date is accepted as `expirationDate` or `expiration_date`; the
    camelCase name wins when both are sent.
    """
    if expiration_date is None:
        expiration_date = expiration_date_snake
    submitted = {
        "name": name,
        "category": category,
        "quantity": quantity,
        "unit": unit,
        "expirationDate": expiration_date,
        "notes": notes,
        "user": user,
    }
    return {key: value for key, value in submitted.items() if value is not None}


async def read_image(
    upload: Optional[UploadFile], image_service: ImageService
) -> Optional[ImagePayload]:
    """
    Read the optional `image` file into memory.

    A file whose size is already known to exceed the limit is rejected
    before it is buffered.

    Browsers send an empty, unnamed part when no file was picked; that is
    treated as "no image".
    """
    if upload is None:
        return None
    if upload.size is not None:
        try:
            image_service.check_size(upload.size)
        except ValidationError:
            await upload.close()
            raise
    try:
        content = await upload.read()
    finally:
        await upload.close()

    if not content and not upload.filename:
        return None

    logger.info(
        "Received image: filename=%s, size=%d bytes",
        upload.filename or "unknown",
        len(content),
    )
    return ImagePayload(
        content=content,
        filename=upload.filename or "image",
        content_type=upload.content_type,
    )


@router.get(
    "/",
    response_model=List[StockResponse],
    responses={500: _ERRORS[500]},
    summary="List every stock item",
)
@router.get("", response_model=List[StockResponse], include_in_schema=False)
async def list_stock(
    db: AsyncSession = Depends(get_db_session),
    service: StockService = Depends(get_stock_service),
) -> List[StockResponse]:
    """All stock items, each with its owner's name and email."""
    return await service.list_stock(db)


@router.post(
    "/",
    status_code=201,
    response_model=StockResponse,
    responses=_ERRORS,
    summary="Create a stock item",
    description=(
        "Multipart form with name, category, quantity, unit, expirationDate, notes, "
        "user and an optional `image` file. The image is stored on the media host "
        "and its URL saved with the item."
    ),
)
@router.post("", status_code=201, response_model=StockResponse, include_in_schema=False)
async def create_stock(
    fields: Dict[str, str] = Depends(stock_form_fields),
    image: Optional[UploadFile] = File(None, description="Optional image of the item"),
    db: AsyncSession = Depends(get_db_session),
    service: StockService = Depends(get_stock_service),
) -> StockResponse:
    payload = await read_image(image, service.image_service)
    return await service.create_stock(db, fields, payload)


@router.get(
    "/{item_id}",
    response_model=StockResponse,
    responses={**_NOT_FOUND, 500: _ERRORS[500]},
    summary="Get a single stock item by ID",
)
async def get_stock(
    item_id: str,
    db: AsyncSession = Depends(get_db_session),
    service: StockService = Depends(get_stock_service),
) -> StockResponse:
    return await service.get_stock(db, item_id)


@router.patch(
    "/{item_id}",
    response_model=StockResponse,
    responses={**_ERRORS, **_NOT_FOUND},
    summary="Partially update a stock item",
    description=(
        "Only the submitted fields change. A new `image` file replaces the stored "
        "image, and the previous one is removed from the media host."
    ),
)
async def update_stock(
    item_id: str,
    fields: Dict[str, str] = Depends(stock_form_fields),
    image: Optional[UploadFile] = File(None, description="Optional replacement image"),
    db: AsyncSession = Depends(get_db_session),
    service: StockService = Depends(get_stock_service),
) -> StockResponse:
    payload = await read_image(image, service.image_service)
    return await service.update_stock(db, item_id, fields, payload)


@router.delete(
    "/{item_id}",
    response_model=MessageResponse,
    responses={**_NOT_FOUND, 500: _ERRORS[500]},
    summary="Delete a stock item and its image",
)
async def delete_stock(
    item_id: str,
    db: AsyncSession = Depends(get_db_session),
    service: StockService = Depends(get_stock_service),
) -> MessageResponse:
    return await service.delete_stock(db, item_id)
