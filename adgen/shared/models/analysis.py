"""
Image analysis data model.
"""

from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class ImageAnalysis(BaseModel):
    """Description of the uploaded product, produced once per image."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    product_name: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("product_name", "productName"),
    )
    product_type: str = Field(
        validation_alias=AliasChoices("product_type", "productType"),
        min_length=1,
    )
    colors: List[str] = Field(default_factory=list)
    style: str = ""
    mood: str = ""
    key_features: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("key_features", "keyFeatures"),
    )
    raw_text: Optional[str] = None

    @property
    def display_name(self) -> str:
        """Best human-readable name for prompts."""
        return self.product_name or self.product_type
