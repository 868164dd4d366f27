from pydantic import BaseModel, ConfigDict
from datetime import datetime


class UserLogin(BaseModel):
    identifier: str  # email o username
    password: str


class UserOut(BaseModel):
    id: int
    email: str
    username: str
    role: str
    created_at: datetime | None = None
    model_config = ConfigDict(from_attributes=True)


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
