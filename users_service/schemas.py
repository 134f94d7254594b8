from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


# ---------- Input schemas ----------

class UserCreate(BaseModel):
    """
    Schema for signup input.
    """
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=6)

    @field_validator("first_name", "last_name")
    @classmethod
    def strip_names(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value


class UserLogin(BaseModel):
    """
    Schema for login credentials.

    Attributes
    ----------
    email : EmailStr
        Email address used for authentication.
    password : str
        Plaintext password supplied by the client.
    """
    email: EmailStr
    password: str = Field(..., min_length=1)


# ---------- Output schemas ----------

class UserRead(BaseModel):
    """
    Schema returned when reading user information.

    Exposes safe fields and hides the password hash and verification token.
    """
    id: int
    first_name: str
    last_name: str
    email: EmailStr
    is_verified: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SignupResponse(BaseModel):
    message: str
    user_id: int


class MessageResponse(BaseModel):
    message: str


# ---------- Token schemas ----------

class Token(BaseModel):
    """
    Schema for login responses.

    Attributes
    ----------
    access_token : str
        Encoded JWT.
    token_type : str
        Token type, usually 'bearer'.
    user : UserRead
        The authenticated user's profile.
    """
    access_token: str
    token_type: str = "bearer"
    user: UserRead
