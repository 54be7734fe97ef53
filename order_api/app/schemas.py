# schemas.py

"""Pydantic models for API payloads and responses.

Fields use snake_case in Python and camelCase on the wire.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Annotated, List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    PlainSerializer,
    field_validator,
)

from .domain import OrderStatus
from .models import CENT

# Monetary values travel as JSON numbers, not strings.
Money = Annotated[
    Decimal, PlainSerializer(float, return_type=float, when_used="json")
]


class OrderItemRequest(BaseModel):
    """A line item in an order creation request."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    product_name: str = Field(
        ..., alias="productName", min_length=1, examples=["Laptop"]
    )
    quantity: int = Field(..., ge=1, examples=[1])
    price: Decimal = Field(..., ge=0, examples=["1299.99"])

    @field_validator("price")
    @classmethod
    def _whole_cents(cls, value: Decimal) -> Decimal:
        # Prices are stored as NUMERIC(10, 2); finer values would be rounded.
        if value != value.quantize(CENT):
            raise ValueError("Price must have at most 2 decimal places")
        return value


class OrderRequest(BaseModel):
    """Input schema for creating an order."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    customer_name: str = Field(
        ..., alias="customerName", min_length=1, examples=["Alice Johnson"]
    )
    customer_email: EmailStr = Field(
        ..., alias="customerEmail", examples=["alice@example.com"]
    )
    items: List[OrderItemRequest] = Field(..., min_length=1)


class OrderItemResponse(BaseModel):
    """Line item representation returned from the API."""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    product_name: str = Field(..., alias="productName")
    quantity: int
    price: Money
    subtotal: Money


class OrderResponse(BaseModel):
    """Order representation returned from the API."""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    customer_name: str = Field(..., alias="customerName")
    customer_email: str = Field(..., alias="customerEmail")
    status: OrderStatus
    items: List[OrderItemResponse]
    total_amount: Money = Field(..., alias="totalAmount")
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")


class ErrorResponse(BaseModel):
    """Body returned for every failed request."""

    timestamp: datetime
    status: int
    error: str
    message: str
    path: str
    details: Optional[List[str]] = None
