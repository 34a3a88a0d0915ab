from pydantic import BaseModel, Field, field_validator

from agrovision.users.schemas import UserResponse


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1)
    senha: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def normalize(cls, value: str) -> str:
        return value.strip().lower()


class LoginResponse(BaseModel):
    message: str = "Login realizado com sucesso"
    token: str
    expiresIn: int
    user: UserResponse


class ChangePasswordRequest(BaseModel):
    senhaAtual: str = Field(..., min_length=1)
    novaSenha: str = Field(..., min_length=6, max_length=72)


class VerifyResponse(BaseModel):
    valid: bool = True
    user: UserResponse
