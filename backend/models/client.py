"""
Client (customer organisation) models.
"""

from datetime import datetime
from pydantic import BaseModel, Field


class ClientCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)


class Client(BaseModel):
    id: str
    name: str
    created_at: datetime

    class Config:
        from_attributes = True
