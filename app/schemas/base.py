"""
Base Pydantic schemas and common types.
"""
from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """Base schema with common configuration."""

    model_config = ConfigDict(
        from_attributes=True,  # Enable ORM mode
        populate_by_name=True,
        use_enum_values=True,
    )


class IDSchema(BaseSchema):
    """Schema mixin for ID field."""
    id: int


class MessageResponse(BaseSchema):
    """Plain acknowledgement returned by mutating endpoints."""
    message: str
