from datetime import datetime, timedelta
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class TransactionOptions(BaseModel):
    """Per-call overrides merged into a single request's headers."""

    model_config = ConfigDict(frozen=True)

    headers: Optional[Dict[str, str]] = None
    ttl: Optional[int] = Field(default=None, ge=0, description="Seconds until the value expires")


class Meta(BaseModel):
    """Metadata of a stored value, read from HEAD response headers."""

    mtime: Optional[datetime] = None  # UTC
    ttl: Optional[timedelta] = None
