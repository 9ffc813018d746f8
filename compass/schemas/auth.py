from pydantic import EmailStr, Field

from compass.models.common import CompassBaseModel
from compass.schemas.provider import AdminOut, ProviderOut


class LoginRequest(CompassBaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class ProviderLoginResponse(CompassBaseModel):
    message: str
    provider: ProviderOut
    token: str


class AdminLoginResponse(CompassBaseModel):
    message: str
    admin: AdminOut
    token: str
