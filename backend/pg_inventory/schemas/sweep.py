"""
Pydantic schemas for the expiry sweep.
"""

from datetime import date

from pydantic import BaseModel


class SweepSummaryResponse(BaseModel):
    as_of: date
    transitioned: int
    skipped: int
    transitioned_ids: list[int]
    skipped_ids: list[int]

    model_config = {"from_attributes": True}
