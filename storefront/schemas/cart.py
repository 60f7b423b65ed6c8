import logging
from decimal import Decimal, InvalidOperation
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
# Anything above this is treated as a bad price
MAX_UNIT_PRICE = Decimal("1000000000")


def clamp_price(value) -> Decimal:
    """Coerce a client supplied price to a Decimal in [0, MAX_UNIT_PRICE], falling back to 0."""
    if value is None:
        return ZERO

    price = None
    if not isinstance(value, bool):
        try:
            price = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            price = None

    if price is None or not price.is_finite() or price < 0 or price > MAX_UNIT_PRICE:
        logger.warning(f"Invalid unit price {value!r} clamped to 0")
        return ZERO
    return price


class BaseSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)


class LineItem(BaseSchema):
    """One product entry in the cart. Serialized as {id, name, unitPrice, quantity}."""
    id: str = Field(..., min_length=1)
    name: str = ""
    unit_price: Decimal = Field(ZERO, ge=0, le=MAX_UNIT_PRICE, alias="unitPrice")
    quantity: int = Field(1, ge=1)

    @property
    def subtotal(self) -> Decimal:
        return self.unit_price * self.quantity

    def as_event_item(self) -> dict:
        return {"id": self.id, "name": self.name, "price": str(self.unit_price)}


class CartItemCreate(BaseSchema):
    id: str = Field(..., min_length=1, json_schema_extra={"example": "robot-01"})
    name: str = Field("", json_schema_extra={"example": "Wind-up Robot"})
    unit_price: Decimal = Field(ZERO, alias="unitPrice", json_schema_extra={"example": "10.00"})
    location: str = "catalog"

    @field_validator("unit_price", mode="before")
    @classmethod
    def price_is_renderable(cls, v):
        return clamp_price(v)


class QuantityAdjust(BaseModel):
    delta: int


class CartPayload(BaseModel):
    """Persisted record layout."""
    v: int = 1
    items: List[LineItem] = []


class CartFragments(BaseModel):
    badge: str
    rows: str
    total: str


class CartRead(BaseModel):
    items: List[LineItem]
    total: Decimal
    total_quantity: int
    view: CartFragments


class CheckoutRead(BaseModel):
    items: List[LineItem]
    total_price: Decimal
    total_quantity: int
    cart: CartRead
