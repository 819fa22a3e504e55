"""
Usage statistics for the dashboard.
"""

from typing import List

from pydantic import BaseModel, Field, computed_field

from adgen.shared.models.generation import ImageVariation


class UsageStats(BaseModel):
    """Per-user generation counts. One credit is spent per stored generation."""

    generations_this_month: int = Field(ge=0)
    generations_today: int = Field(ge=0)
    credits_total: int = Field(ge=0)
    recent_generations: List[ImageVariation] = Field(default_factory=list)

    @computed_field
    @property
    def credits_used(self) -> int:
        return self.generations_this_month

    @computed_field
    @property
    def credits_remaining(self) -> int:
        return max(0, self.credits_total - self.credits_used)
