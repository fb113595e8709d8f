from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Success envelope shared by every endpoint: ``{status, message, data}``."""

    model_config = ConfigDict(extra="forbid")

    status: bool = True
    message: str = ""
    data: T | None = None


def ok(data: T | None = None, message: str = "") -> ApiResponse[T]:
    return ApiResponse(status=True, message=message, data=data)
