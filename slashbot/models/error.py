"""Error tracking data models."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class ErrorRecord(BaseModel):
    """Error record for a failed workflow step."""

    step: str
    error_type: str
    message: str
    status_code: Optional[int] = None
    timestamp: datetime
