"""Base Pydantic schemas shared by every resource."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class BaseSchema(BaseModel):
    """Base schema with common configuration.

    Fields are snake_case in Python and camelCase on the wire.
    """

    class Config:
        from_attributes = True
        populate_by_name = True
        str_strip_whitespace = True
        validate_assignment = True
        alias_generator = to_camel


class UpdateSchema(BaseSchema):
    """Partial update payload: only fields the client sent are applied."""

    def changes(self, exclude: Optional[set] = None) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True, exclude=exclude or set())


class ErrorResponse(BaseSchema):
    """Body returned for every failed request."""

    error: str = Field(description="Human readable reason")
    code: Optional[str] = Field(None, description="Machine readable error code")


class SuccessResponse(BaseSchema):
    success: bool = True


class HealthCheckResponse(BaseSchema):
    """Health check response schema."""

    status: str = Field(description="Overall service health status")
    timestamp: datetime = Field(description="Health check timestamp")
    version: str = Field(description="Service version")
    environment: str = Field(description="Deployment environment")
    dependencies: Dict[str, Any] = Field(description="Dependency health status")


def dump_list(schema: type, rows: List[Any]) -> List[Dict[str, Any]]:
    """Serialise ORM rows through a response schema using wire names."""
    return [schema.model_validate(row).model_dump(by_alias=True, mode="json") for row in rows]
