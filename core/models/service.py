"""Service configuration and price quote models.

All prices are stored in cents (integer) to avoid floating point issues.
$10.00 = 1000 cents.
"""

from enum import Enum

from pydantic import BaseModel, Field, field_validator, model_validator


class Recurrence(str, Enum):
    """How often a booked service repeats."""

    ONE_TIME = "one_time"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"

    @property
    def is_recurring(self) -> bool:
        return self is not Recurrence.ONE_TIME


class PaymentFrequency(str, Enum):
    """How the customer pays for a recurring service."""

    PER_SERVICE = "per_service"
    MONTHLY = "monthly"
    YEARLY = "yearly"


_TIER_RANK = {"standard": 0, "premium": 1, "elite": 2}


class Tier(str, Enum):
    """Service quality level. Ordered: standard < premium < elite."""

    STANDARD = "standard"
    PREMIUM = "premium"
    ELITE = "elite"

    @property
    def rank(self) -> int:
        return _TIER_RANK[self.value]

    def __lt__(self, other):
        if not isinstance(other, Tier):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, Tier):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, Tier):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, Tier):
            return NotImplemented
        return self.rank >= other.rank


class ServiceConfiguration(BaseModel):
    """The subset of a line item's configuration that drives its price."""

    room_type: str = Field(..., min_length=1, max_length=64)
    tier: Tier = Tier.STANDARD
    room_count: int = Field(1, ge=1, le=50)
    add_ons: list[str] = Field(default_factory=list)
    reductions: list[str] = Field(default_factory=list)
    cleanliness_level: int = Field(1, ge=1, le=5)
    recurrence: Recurrence = Recurrence.ONE_TIME

    model_config = {"frozen": True}

    @field_validator("add_ons", "reductions")
    @classmethod
    def reject_duplicates(cls, value: list[str]) -> list[str]:
        """Add-ons and reductions are sets; a repeated id is a caller bug."""
        if len(set(value)) != len(value):
            raise ValueError("Add-on and reduction ids must be unique")
        return value

    @model_validator(mode="after")
    def validate_disjoint(self) -> "ServiceConfiguration":
        """An id cannot be both added and skipped."""
        overlap = set(self.add_ons) & set(self.reductions)
        if overlap:
            raise ValueError(
                f"Ids cannot be both add-ons and reductions: {', '.join(sorted(overlap))}"
            )
        return self


class PriceAdjustment(BaseModel):
    """One display line of a price breakdown. Never summed back into the price."""

    category: str
    description: str
    amount_cents: int

    model_config = {"frozen": True}


class PriceQuote(BaseModel):
    """Result of pricing one ServiceConfiguration."""

    first_service_price_cents: int = Field(..., ge=0)
    recurring_service_price_cents: int = Field(..., ge=0)
    estimated_duration_minutes: int = Field(..., ge=0)
    breakdown: tuple[PriceAdjustment, ...] = ()
    recommended_tier: Tier | None = None

    model_config = {"frozen": True}

    @property
    def first_service_price_dollars(self) -> float:
        """First service price in dollars for display."""
        return self.first_service_price_cents / 100

    @property
    def recurring_service_price_dollars(self) -> float:
        """Recurring service price in dollars for display."""
        return self.recurring_service_price_cents / 100
