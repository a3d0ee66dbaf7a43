from pydantic import BaseModel
from typing import Optional
from routers.users.schemas import DetailedUserResponse, UserAuthStatus

# Request schemas
class UserLogin(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None

# Response schemas
class TokenResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    user_dto: DetailedUserResponse

class AuthErrorResponse(BaseModel):
    status: UserAuthStatus
    message: str
