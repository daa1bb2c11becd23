from __future__ import annotations

from pydantic import BaseModel, Field
from typing import List, Optional


class ErrorItem(BaseModel):
    """One entry of a server error payload."""

    message: str
    code: Optional[str] = None


class ErrorModel(BaseModel):
    """Standard error payload returned by upload endpoints.

    Shape: `{"errors": [{"message": "..."}]}`.
    """

    errors: List[ErrorItem] = Field(default_factory=list)

    def first_message(self) -> str:
        return self.errors[0].message if self.errors else ""
