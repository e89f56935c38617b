from typing import Optional, Union

from pydantic import BaseModel


class User(BaseModel):
    id: Union[int, str]
    email: str
    name: str
    picture: Optional[str] = None


class AuthResponse(BaseModel):
    """Response of the mobile Google sign-in endpoint."""
    token: Optional[str] = None
    message: str = ""
    success: bool = False
    user: Optional[User] = None
