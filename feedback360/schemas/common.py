from typing import Generic, Optional, TypeVar
from pydantic import BaseModel

T = TypeVar("T")


class DataResponse(BaseModel, Generic[T]):
    data: Optional[T] = None


class SuccessResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
