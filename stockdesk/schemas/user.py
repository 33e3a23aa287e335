# stockdesk/schemas/user.py
from datetime import datetime

from pydantic import BaseModel, ConfigDict

from stockdesk.domain.enums import UserRole


class User(BaseModel):
    id: str
    email: str
    role: UserRole
    created_at: datetime

    model_config = ConfigDict(extra="allow")
