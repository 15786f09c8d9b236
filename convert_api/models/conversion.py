"""Pydantic models for the conversion endpoint."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

VALUE_KEY = "value"


class ConversionRequest(BaseModel):
    """Request model for currency conversion."""

    model_config = ConfigDict(strict=True)

    value: str = Field(
        default="",
        description="Three-letter currency code followed by an integer amount, e.g. USD100",
        examples=["USD100"],
    )

    @model_validator(mode="before")
    @classmethod
    def normalize_document(cls, data: Any) -> Any:
        """Match the value key case-insensitively and treat nulls as absent.

        A null document decodes as an empty request; a null value leaves the
        field at its default. Other keys are dropped.
        """
        if data is None:
            return {}
        if not isinstance(data, dict):
            return data

        normalized: dict[str, Any] = {}
        for key, item in data.items():
            if isinstance(key, str) and key.casefold() == VALUE_KEY and item is not None:
                normalized[VALUE_KEY] = item
        return normalized


class ConversionResponse(BaseModel):
    """Response model for currency conversion."""

    answer: int = Field(..., description="Amount expressed in the reference currency, floored")


class ErrorResponse(BaseModel):
    """Error response model."""

    error: Literal["Bad Request"] = Field(default="Bad Request", description="Error category")
    message: str = Field(..., description="Human-readable error detail")
