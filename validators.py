"""
Input Validation & Sanitization Utilities
Provides pydantic request schemas for the JSON API and converts their failures
into ValidationError with a readable, field-naming message.
"""
import re
import logging
from typing import Dict, Any, List, Optional, Literal, Type, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)

# Regex patterns
EMAIL_PATTERN = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')

PROJECT_STATUSES = ('planning', 'in-progress', 'completed')
QUOTE_STATUSES = ('pending', 'received', 'accepted', 'rejected', 'completed')


class ValidationError(Exception):
    """Custom exception for validation errors"""
    def __init__(self, message: str, field: Optional[str] = None):
        self.message = message
        self.field = field
        super().__init__(self.message)


def sanitize_string(value: str, max_length: int = 1000) -> str:
    """
    Sanitize string input by removing potentially dangerous characters

    Args:
        value: String to sanitize
        max_length: Maximum allowed length

    Returns:
        Sanitized string
    """
    if not isinstance(value, str):
        return str(value)

    # Remove null bytes
    sanitized = value.replace('\x00', '')

    # Trim whitespace
    sanitized = sanitized.strip()

    # Limit length
    if len(sanitized) > max_length:
        sanitized = sanitized[:max_length]

    return sanitized


# ============================================================================
# REQUEST SCHEMAS
# ============================================================================

class ApiSchema(BaseModel):
    """Base schema: camelCase on the wire, snake_case in Python, unknown keys ignored."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra='ignore',
        str_strip_whitespace=True,
    )

    @field_validator('*', mode='before')
    @classmethod
    def _sanitize_strings(cls, value):
        if isinstance(value, str):
            return sanitize_string(value, max_length=5000)
        return value

    def to_api(self, partial: bool = False) -> Dict[str, Any]:
        """Dump using camelCase API keys. Partial dumps keep only supplied fields, nulls included."""
        return self.model_dump(by_alias=True, exclude_unset=partial)


def reject_null(value):
    """Optional update fields whose column cannot be cleared refuse an explicit null."""
    if value is None:
        raise ValueError('Field cannot be null')
    return value


class RegisterRequest(ApiSchema):
    username: str = Field(..., min_length=3, max_length=100)
    password: str = Field(..., min_length=6, max_length=200)
    email: str = Field(..., max_length=254)
    name: str = Field(..., min_length=1, max_length=255)

    @field_validator('email')
    @classmethod
    def _valid_email(cls, value: str) -> str:
        if not EMAIL_PATTERN.match(value):
            raise ValueError('Invalid email format')
        return value


class LoginRequest(ApiSchema):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class ProjectCreate(ApiSchema):
    name: str = Field(..., min_length=1, max_length=255)
    project_type: str = Field(..., alias='type', min_length=1, max_length=100)
    description: str = Field(..., min_length=1)
    status: Literal[PROJECT_STATUSES] = 'planning'
    estimated_cost_min: Optional[int] = Field(None, ge=0)
    estimated_cost_max: Optional[int] = Field(None, ge=0)
    actual_cost: Optional[int] = Field(None, ge=0)
    timeline: Optional[str] = None
    location: Optional[str] = None
    square_footage: Optional[int] = Field(None, gt=0)
    details: Optional[Dict[str, Any]] = None


class ProjectUpdate(ApiSchema):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    project_type: Optional[str] = Field(None, alias='type', min_length=1, max_length=100)
    description: Optional[str] = None
    status: Optional[Literal[PROJECT_STATUSES]] = None
    estimated_cost_min: Optional[int] = Field(None, ge=0)
    estimated_cost_max: Optional[int] = Field(None, ge=0)
    actual_cost: Optional[int] = Field(None, ge=0)
    timeline: Optional[str] = None
    location: Optional[str] = None
    square_footage: Optional[int] = Field(None, gt=0)
    details: Optional[Dict[str, Any]] = None

    @field_validator('name', 'project_type', 'description', 'status', mode='before')
    @classmethod
    def _not_null(cls, value):
        return reject_null(value)


class QuoteRequest(ApiSchema):
    project_id: str = Field(..., min_length=1)
    contractor_ids: List[str] = Field(..., min_length=1)
    message: Optional[str] = None

    @field_validator('contractor_ids')
    @classmethod
    def _unique_ids(cls, value: List[str]) -> List[str]:
        # Preserve request order while dropping repeats
        return list(dict.fromkeys(value))


class QuoteUpdate(ApiSchema):
    status: Optional[Literal[QUOTE_STATUSES]] = None
    amount: Optional[int] = Field(None, ge=0)
    description: Optional[str] = None
    timeline: Optional[str] = None
    details: Optional[Dict[str, Any]] = None

    @field_validator('status', mode='before')
    @classmethod
    def _not_null(cls, value):
        return reject_null(value)


class ReviewCreate(ApiSchema):
    contractor_id: str = Field(..., min_length=1)
    project_id: Optional[str] = None
    rating: int = Field(..., ge=1, le=5)
    review: Optional[str] = None


class RenovationEstimate(ApiSchema):
    renovation_type: str = Field(..., min_length=1)
    square_footage: Union[int, float] = Field(..., gt=0)
    quality_level: str = Field(..., min_length=1)
    location: str = Field(..., min_length=1)
    scope: str = Field(..., min_length=1)


class ConstructionEstimate(ApiSchema):
    construction_type: str = Field(..., min_length=1)
    square_footage: Union[int, float] = Field(..., gt=0)
    stories: str = Field(..., min_length=1)
    quality_level: str = Field(..., min_length=1)
    location: str = Field(..., min_length=1)
    lot_size: Optional[str] = None
    details: Optional[str] = None

    @field_validator('stories', 'lot_size', mode='before')
    @classmethod
    def _numbers_as_text(cls, value):
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class DesignInspirationRequest(ApiSchema):
    room: str = Field(..., min_length=1, max_length=100)
    style: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=2000)


# ============================================================================
# VALIDATION ENTRY POINT
# ============================================================================

def format_pydantic_error(error: PydanticValidationError) -> str:
    """
    Render pydantic errors as one readable line.

    Example:
        Validation error: Field required at "name"; Input should be ... at "status"
    """
    parts = []
    for item in error.errors():
        location = '.'.join(str(part) for part in item.get('loc', ()))
        message = item.get('msg', 'Invalid value')
        if message.startswith('Value error, '):
            message = message[len('Value error, '):]
        parts.append(f'{message} at "{location}"' if location else message)
    return 'Validation error: ' + '; '.join(parts)


def validate_payload(schema: Type[ApiSchema], data: Any) -> ApiSchema:
    """
    Validate a request body against a schema

    Args:
        schema: ApiSchema subclass
        data: Decoded JSON body

    Returns:
        Validated schema instance

    Raises:
        ValidationError: With a message naming the offending field(s)
    """
    if not isinstance(data, dict):
        raise ValidationError('Validation error: Request body must be a JSON object')
    try:
        return schema.model_validate(data)
    except PydanticValidationError as e:
        errors = e.errors()
        field = '.'.join(str(p) for p in errors[0].get('loc', ())) if errors else None
        message = format_pydantic_error(e)
        logger.info(f"Rejected {schema.__name__}: {message}")
        raise ValidationError(message, field=field)
