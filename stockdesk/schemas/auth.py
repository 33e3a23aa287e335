# stockdesk/schemas/auth.py
from pydantic import BaseModel, ConfigDict


class AuthUser(BaseModel):
    id: str
    email: str | None = None

    model_config = ConfigDict(extra="allow")


class Session(BaseModel):
    """Authenticated session: ``{access_token, refresh_token?, user}``."""

    access_token: str
    refresh_token: str | None = None
    user: AuthUser

    model_config = ConfigDict(extra="allow")

    def as_dict(self) -> dict:
        data = {"access_token": self.access_token, "user": {"id": self.user.id, "email": self.user.email}}
        if self.refresh_token:
            data["refresh_token"] = self.refresh_token
        return data
