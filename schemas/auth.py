"""
Schemas Pydantic para el acceso de administrador
"""
from pydantic import BaseModel, Field


class PasswordCheck(BaseModel):
    password: str = Field(..., min_length=1, max_length=128)


class PasswordCheckResult(BaseModel):
    valid: bool
