from pydantic import BaseModel, Field


class Credentials(BaseModel):
    email: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1)


class CurrentUser(BaseModel):
    email: str
    isSuperuser: bool = False


class AuthResult(BaseModel):
    success: bool = True
    user: CurrentUser
