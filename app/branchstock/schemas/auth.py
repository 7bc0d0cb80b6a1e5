from pydantic import BaseModel, EmailStr


class LoginRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "example": {
                "email": "owner@example.com",
                "password": "change-me",
            }
        }
    }

    email: EmailStr
    password: str


class UserResponse(BaseModel):
    id: str
    email: str
    full_name: str
    role: str
    branch_id: str | None


class LoginData(BaseModel):
    token: str
    user: UserResponse


class LoginResponse(BaseModel):
    success: bool = True
    data: LoginData


class MeResponse(BaseModel):
    success: bool = True
    data: UserResponse
