"""Pydantic schemas for API responses."""

from pydantic import BaseModel, Field


class CounterResponse(BaseModel):
    """Counter value as stored in the counters table."""

    id: str = Field(description="Counter name (counter_id column)")
    value: int = Field(description="Current value after the request was applied")
