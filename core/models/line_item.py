"""Line item domain models.

All prices are stored in cents (integer) to avoid floating point issues.
$10.00 = 1000 cents.
"""

from typing import Any

from pydantic import BaseModel, Field, model_validator

from core.models.service import PaymentFrequency, Recurrence, ServiceConfiguration

# Price identifier shared by every configurable service item.
CUSTOM_SERVICE_PRICE_ID = "price_custom_cleaning"


class CustomerDetails(BaseModel):
    """Where the service happens. Notes are free text and never affect identity."""

    address: str | None = Field(None, max_length=500)
    postal_code: str | None = Field(None, max_length=20)
    notes: str | None = Field(None, max_length=2000)

    model_config = {"frozen": True}


class LineItemConfiguration(BaseModel):
    """Structured metadata attached to a line item."""

    service_type: str = Field("standard", min_length=1, max_length=64)
    payment_frequency: PaymentFrequency = PaymentFrequency.PER_SERVICE
    room: ServiceConfiguration | None = None
    customer: CustomerDetails = Field(default_factory=CustomerDetails)
    extra: dict[str, Any] = Field(default_factory=dict)

    model_config = {"frozen": True}


class LineItem(BaseModel):
    """A purchasable unit in the cart."""

    id: str = Field(..., min_length=1, max_length=200)
    name: str = Field(..., min_length=1, max_length=255)
    unit_price_cents: int = Field(..., ge=0)
    quantity: int = Field(1, ge=1)
    recurrence: Recurrence = Recurrence.ONE_TIME
    price_id: str | None = None
    configuration: LineItemConfiguration = Field(default_factory=LineItemConfiguration)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_recurrence(self) -> "LineItem":
        """Identity reads recurrence from the item, pricing from the room; they must agree."""
        room = self.configuration.room
        if room is not None and room.recurrence != self.recurrence:
            raise ValueError(
                f"Item recurrence '{self.recurrence.value}' does not match "
                f"configured recurrence '{room.recurrence.value}'"
            )
        return self

    @property
    def is_custom_service(self) -> bool:
        """Configured services share one price id; catalog products each have their own."""
        return self.price_id is None or self.price_id == CUSTOM_SERVICE_PRICE_ID

    @property
    def total_price_cents(self) -> int:
        return self.unit_price_cents * self.quantity

    @property
    def total_price_dollars(self) -> float:
        """Total price in dollars for display."""
        return self.total_price_cents / 100
