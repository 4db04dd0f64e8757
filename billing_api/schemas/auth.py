from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

class LoginRequest(BaseModel):
    login: str = Field(..., min_length=1, max_length=64)
    password: str = Field(..., min_length=1)

class OperatorPublic(BaseModel):
    id: int
    login: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class LoginResponse(BaseModel):
    token: str
    token_type: str = "Bearer"
    expires_at: datetime
    operator: OperatorPublic

class WhoAmI(BaseModel):
    id: int
    login: str
    permissions: List[int]
