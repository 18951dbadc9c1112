"""
API request models using Pydantic.
"""
from pydantic import BaseModel, Field, field_validator


class EnvironmentalDataRequest(BaseModel):
    """Request body for the analysis endpoints."""
    location: str = Field(
        description="Free-text place name",
        examples=["Mumbai, Maharashtra"]
    )

    @field_validator("location")
    @classmethod
    def location_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Location parameter is required")
        return value
