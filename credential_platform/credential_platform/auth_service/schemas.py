from pydantic import BaseModel, ConfigDict, Field, PositiveInt

from typing import Literal, Optional

from .models import MAX_IDENTIFIER_LENGTH

STATUS_SUCCESS = "Succès"


class CredentialsIn(BaseModel):
    """Body of /register and /login."""
    model_config = ConfigDict(populate_by_name=True)

    identifier: Optional[str] = Field(default=None, alias="identifiant", max_length=MAX_IDENTIFIER_LENGTH)
    secret: Optional[str] = Field(default=None, alias="motdepasse")


class TokenIn(BaseModel):
    """Body of /logout and /verify."""
    model_config = ConfigDict(populate_by_name=True)

    token: Optional[str] = Field(default=None, alias="jeton")


class UpdateIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[PositiveInt] = None
    identifier: Optional[str] = Field(default=None, alias="identifiant", max_length=MAX_IDENTIFIER_LENGTH)
    secret: Optional[str] = Field(default=None, alias="motdepasse")
    token: Optional[str] = Field(default=None, alias="jeton")


class UserInfo(BaseModel):
    userId: int
    identifiant: str


class Envelope(BaseModel):
    statut: Literal["Succès", "Erreur"] = STATUS_SUCCESS
    message: str


class TokenEnvelope(Envelope):
    token: str


class VerifyEnvelope(Envelope):
    utilisateur: UserInfo
