from pydantic import BaseModel, EmailStr, Field, field_validator


class SignupRequest(BaseModel):
    fname: str = Field(..., min_length=1, max_length=100)
    lname: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str

    @field_validator("fname", "lname")
    @classmethod
    def strip_names(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("First and last name are required")
        return v


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)
