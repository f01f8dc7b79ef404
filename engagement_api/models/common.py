from __future__ import annotations

from typing import Annotated, Any, Generic, List, Optional, TypeVar

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")

# ObjectId из Mongo отдаём строкой
ObjectIdStr = Annotated[str, BeforeValidator(str)]


class ApiModel(BaseModel):
    """camelCase on the wire, snake_case accepted on input."""

    model_config = ConfigDict(alias_generator=to_camel,
                              populate_by_name=True)


class ApiResponse(ApiModel, Generic[T]):
    status_code: int = 200
    message: str = ""
    data: Optional[T] = None
    success: bool = True


class ErrorResponse(ApiModel):
    status_code: int
    message: str
    errors: List[Any] = Field(default_factory=list)
    success: bool = False


class Page(ApiModel, Generic[T]):
    items: List[T]
    total_items: int
    total_pages: int
    current_page: int
    page_size: int
    has_next: bool
    has_prev: bool


class OwnerProfile(ApiModel):
    username: Optional[str] = None
    full_name: Optional[str] = None
    email: Optional[str] = None
    avatar: Optional[str] = None


def ok(data: Any = None, message: str = "", status_code: int = 200) -> dict:
    """Success envelope; FastAPI validates it against the response_model."""
    return {"status_code": status_code, "message": message,
            "data": data, "success": True}
