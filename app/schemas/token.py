# food_delivery_api/app/schemas/token.py
from pydantic import BaseModel


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class TokenMapping(BaseModel):
    """Identifiers of the tokens currently valid for a user."""
    access_uid: str
    refresh_uid: str


class RefreshTokenRequest(BaseModel):
    refresh_token: str
