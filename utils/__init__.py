"""Utility modules for cross-cutting concerns."""

from utils.money import round_half_up, apply_bps, apply_percentage, format_cents
from utils.timezone import now_utc
