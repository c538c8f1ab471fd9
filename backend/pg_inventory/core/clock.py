"""
Current-date source for rental period arithmetic.
"""

from datetime import date, datetime
from zoneinfo import ZoneInfo

from pg_inventory.core.config import get_settings


def today() -> date:
    """Today's date in the configured business timezone."""
    return datetime.now(ZoneInfo(get_settings().TIMEZONE)).date()
