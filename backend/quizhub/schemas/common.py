from __future__ import annotations

from typing import Any, Optional, Dict
from pydantic import BaseModel


class ErrorOut(BaseModel):
    code: str
    message: str
    details: Optional[Dict[str, Any]] = None


class Envelope(BaseModel):
    request_id: str
    success: bool = True
    data: Optional[Any] = None
    message: Optional[str] = None
    error: Optional[ErrorOut] = None
