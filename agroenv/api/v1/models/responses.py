"""
API response models using Pydantic.
"""
from typing import Optional
from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Error body returned by the non-streaming endpoints."""
    error: str = Field(description="Short error category")
    detail: str = Field(description="Human-readable error message")
    kind: Optional[str] = Field(
        default=None,
        description="Machine-readable failure kind"
    )


# Example body of a successful streamed analysis, used in the OpenAPI docs
STREAM_EXAMPLE = (
    'event: status\n'
    'data: {"stage":"geocoding","message":"Finding location coordinates..."}\n\n'
    'event: coordinates\n'
    'data: {"latitude":19.07,"longitude":72.87,"location":"Mumbai"}\n\n'
    'event: weather\n'
    'data: {"metric":"temperature","value":27.4,"label":"Average Temperature","unit":"°C"}\n\n'
    'event: soil\n'
    'data: {"metric":"type","value":"Clay","label":"Soil Type"}\n\n'
    'event: complete\n'
    'data: {"message":"Analysis complete","timestamp":"2024-01-15T10:00:00+00:00"}\n\n'
)
