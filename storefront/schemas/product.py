from decimal import Decimal

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class ProductRead(BaseModel):
    id: str
    name: str = Field(..., json_schema_extra={"example": "Wind-up Robot"})
    price: Decimal = Field(..., ge=0, json_schema_extra={"example": 10.00})
    description: str | None = None
    image: str | None = None
    category: str | None = None

    model_config = ConfigDict(from_attributes=True)


class ContactForm(BaseModel):
    """Storefront contact form. Extra form fields are kept and forwarded to analytics."""
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    message: str = Field(..., min_length=1, max_length=2000)

    model_config = ConfigDict(extra="allow")
