import math

from pydantic import field_validator

MAX_NAME_LENGTH = 120
MAX_DESCRIPTION_LENGTH = 5000
MAX_STORE_NAME_LENGTH = 120


def validate_url(value: str) -> str:
    """Accept absolute http(s) URLs only."""
    if not value.startswith(("http://", "https://")):
        raise ValueError("URL must start with http:// or https://")
    return value


class ProductValidatorMixin:
    @field_validator("name")
    @classmethod
    def name_valid(cls, v):
        if v is not None and not v.strip():
            raise ValueError("Product name cannot be empty")
        if v is not None and len(v) > MAX_NAME_LENGTH:
            raise ValueError("Product name must be between 1 and 120 characters")
        return v.strip() if v is not None else v

    @field_validator("price")
    @classmethod
    def price_valid(cls, v):
        if v is not None and not math.isfinite(v):
            raise ValueError("Price must be a finite number")
        if v is not None and v < 0:
            raise ValueError("Price must be non-negative")
        return v

    @field_validator("description")
    @classmethod
    def description_valid(cls, v):
        if v is not None and len(v) > MAX_DESCRIPTION_LENGTH:
            raise ValueError("Description can be up to 5000 characters")
        return v

    @field_validator("store_name")
    @classmethod
    def store_name_valid(cls, v):
        if v is not None and not v.strip():
            raise ValueError("Store name cannot be empty")
        if v is not None and len(v) > MAX_STORE_NAME_LENGTH:
            raise ValueError("Store name can be up to 120 characters")
        return v

    @field_validator("store_link", "image_url")
    @classmethod
    def url_valid(cls, v):
        if v:
            return validate_url(v)
        return v or None


class ProductUpdateValidatorMixin:
    """Partial updates may omit a field but only clear the optional links"""

    @field_validator("name", "category", "description", "price", "store_name")
    @classmethod
    def required_field_not_null(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v
