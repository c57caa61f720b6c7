"""
HomeStock Backend — Pydantic Request/Response Schemas
=======================================================

What:  Pydantic models defining the API contract for stock items.
Why:   Validation of incoming fields before any upload or write, and
       consistent JSON serialization of responses.
How:   StockCreate / StockUpdate validate raw form fields (camelCase or
       snake_case). Response models are built from ORM objects and
       serialized with camelCase aliases (`expirationDate`, `addedDate`).
Who:   Used by StockService for validation and by routes as response models.

Design Decision:
    Schemas are separate from SQLAlchemy models so that the API contract
    (aliases, nested user summary) can differ from the table layout
    (`user_id` column, snake_case names).
"""

from datetime import datetime
from typing import Any, Dict, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from homestock.exceptions import ValidationError
from homestock.models.stock import Category, Unit

SchemaT = TypeVar("SchemaT", bound=BaseModel)


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ══════════════════════════════════════════════════════════════════════════
# Request Models — validated before any upload or write
# ══════════════════════════════════════════════════════════════════════════


class StockCreate(_CamelModel):
    """
    What:  Complete field set for a new stock item.
    Rules: name non-empty, category/unit in their enumerated sets,
           quantity finite and >= 0, user reference present. unit defaults to "units".
    """
    model_config = ConfigDict(use_enum_values=True, extra="ignore")

    name: str = Field(min_length=1)
    category: Category
    quantity: float = Field(ge=0, allow_inf_nan=False)
    unit: Unit = Field(default=Unit.UNITS, validate_default=True)
    expiration_date: Optional[datetime] = None
    notes: Optional[str] = None
    user: str = Field(min_length=1, description="ID of the owning user")
    image: Optional[str] = Field(default=None, description="Set by the service after upload")

    @field_validator("expiration_date", mode="before")
    @classmethod
    def blank_date_is_none(cls, v: Any) -> Any:
        """Form submissions send an empty string for an untouched date input."""
        if isinstance(v, str) and not v.strip():
            return None
        return v


class StockUpdate(StockCreate):
    """
    What:  Partial field set for PATCH. Only supplied fields are validated
           and applied; everything else is left untouched.
    """

    name: Optional[str] = Field(default=None, min_length=1)
    category: Optional[Category] = None
    quantity: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    unit: Optional[Unit] = None
    user: Optional[str] = Field(default=None, min_length=1)

    @model_validator(mode="after")
    def required_fields_not_null(self) -> "StockUpdate":
        """A supplied required field may change but not be cleared."""
        for field in ("name", "category", "quantity", "unit", "user"):
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{to_camel(field)} cannot be null")
        return self

    def changes(self) -> Dict[str, Any]:
        """Only the fields the client actually sent."""
        return self.model_dump(exclude_unset=True)


def parse_fields(schema: Type[SchemaT], fields: Mapping[str, Any]) -> SchemaT:
    """
    Validate raw fields against a schema, translating Pydantic's error into
    the application's ValidationError (one "field: reason" entry per problem).
    """
    try:
        return schema.model_validate(dict(fields))
    except PydanticValidationError as e:
        problems = []
        for err in e.errors():
            location = ".".join(str(part) for part in err["loc"]) or "body"
            problems.append(f"{location}: {err['msg']}")
        raise ValidationError(
            detail="; ".join(problems),
            context={"errors": problems},
        ) from e


# ══════════════════════════════════════════════════════════════════════════
# Response Models — What the API returns to clients
# ══════════════════════════════════════════════════════════════════════════


class UserSummary(_CamelModel):
    """The owning user, as embedded in every stock response."""
    id: str
    name: str
    email: str


class StockResponse(_CamelModel):
    """
    What:  Full representation of a stock item.
    Who:   Returned by every /api/v1/stock endpoint except DELETE.
    """
    id: str = Field(description="Opaque identifier assigned at creation")
    name: str
    category: str
    quantity: float
    unit: str
    expiration_date: Optional[datetime] = None
    added_date: datetime
    notes: Optional[str] = None
    user: Optional[UserSummary] = Field(
        default=None, description="Owning user; null if the reference is dangling"
    )
    image: Optional[str] = Field(default=None, description="Media host URL, null without image")


class MessageResponse(BaseModel):
    """Plain confirmation message (DELETE, root route)."""
    message: str


class ErrorResponse(BaseModel):
    """
    What:  Error body shared by every endpoint.

    Example:
        {
            "message": "Stock item not found",
            "error": "stock item with ID '000000000000000000000000' was not found",
            "request_id": "1a2b3c4d"
        }
    """
    message: str = Field(description="Short summary of what failed")
    error: str = Field(description="Human-readable detail")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """
    What:  Health check response showing service and dependency status.
    Who:   Returned by GET /health for monitoring and load balancer checks.
    """
    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    media_host: str = Field(description="Image host status: available, unavailable")
    uptime_seconds: float = Field(description="Seconds since service started")
