"""Pydantic models for Shortlinks requests."""

from typing import Optional

from pydantic import (
    BaseModel,
    Field,
    HttpUrl,
    TypeAdapter,
    ValidationError,
    field_validator,
)

_http_url = TypeAdapter(HttpUrl)


class ShortUrlCreate(BaseModel):
    """Model for creating a short URL."""

    url: str = Field(..., description="The original long URL to shorten")
    validity: Optional[int] = Field(
        None, ge=1, description="Validity in minutes (default 30)"
    )
    shortcode: Optional[str] = Field(
        None,
        min_length=1,
        max_length=20,
        pattern=r"^[A-Za-z0-9]+$",
        description="Custom short code",
    )

    @field_validator("url")
    @classmethod
    def check_http_url(cls, value: str) -> str:
        # Validated as HttpUrl, stored verbatim so redirects match the input
        try:
            _http_url.validate_python(value)
        except ValidationError:
            raise ValueError("URL must be a valid HTTP or HTTPS URL") from None
        return value


class ErrorResponse(BaseModel):
    """Model for error responses."""

    detail: str
    error_code: Optional[str] = None
