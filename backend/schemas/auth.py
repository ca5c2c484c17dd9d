from pydantic import BaseModel
from typing import Optional


# Schema for admin authentication credentials
class AdminLogin(BaseModel):
    username: str
    password: str


# Identity carried by a valid admin token
class AdminIdentity(BaseModel):
    username: str
    role: str = "admin"


# Login result; the token itself travels in the cookie
class LoginResponse(BaseModel):
    success: bool = True
    access_token: Optional[str] = None
    token_type: str = "bearer"
