"""Auth Schemas: register/login bodies and the small response envelopes.

Invariants:
    - name: 1-200 chars, stripped, non-empty
    - password: 1-200 chars (bcrypt only reads the first 72 bytes of password + pepper)
    - code: 1-100 chars, stripped
"""

from pydantic import BaseModel, Field, field_validator


class RegisterRequest(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    password: str = Field(min_length=1, max_length=200)
    code: str = Field(min_length=1, max_length=100)

    @field_validator("name", "code")
    @classmethod
    def strip_value(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("value cannot be empty or whitespace")
        return v


class LoginRequest(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    password: str = Field(min_length=1, max_length=200)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return v.strip()


class MessageResponse(BaseModel):
    msg: str


class InviteResponse(BaseModel):
    message: str


class AuthorStatusResponse(BaseModel):
    name: str
    invites_remaining: int
