# This project was developed with assistance from AI tools.
"""Analytics response schema."""

from pydantic import BaseModel, Field


class AnalyticsOverview(BaseModel):
    """Pipeline counts within the caller's data scope."""

    total: int
    by_status: dict[str, int] = Field(default_factory=dict)
    by_display_status: dict[str, int] = Field(default_factory=dict)
    by_category: dict[str, int] = Field(default_factory=dict)
    by_district: dict[str, int] = Field(default_factory=dict)
    average_processing_days: float | None = Field(
        default=None,
        description="Mean days from submission to approval.",
    )
