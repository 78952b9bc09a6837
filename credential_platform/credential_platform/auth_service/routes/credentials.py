"""
Credential and session endpoints used by the frontend and itinerary relays.
"""
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from .. import service
from ..auth import Authenticator
from ..db import get_db
from ..errors import InvalidCredentials, UnknownToken
from ..schemas import CredentialsIn, Envelope, TokenEnvelope, TokenIn, UpdateIn, UserInfo, VerifyEnvelope
from ..utils.event_logger import log_auth_event

router = APIRouter(tags=["credentials"])


def get_authenticator(request: Request) -> Authenticator:
    return request.app.state.authenticator


@router.post("/register", response_model=TokenEnvelope)
def register(
    payload: CredentialsIn,
    request: Request,
    db: Session = Depends(get_db),
    authenticator: Authenticator = Depends(get_authenticator)
):
    user, token = service.register(db, authenticator, payload.identifier, payload.secret)
    log_auth_event("register", request, user.username, user.id)
    return TokenEnvelope(message=f"Utilisateur {user.username} créé !", token=token)


@router.post("/login", response_model=TokenEnvelope)
def login(
    payload: CredentialsIn,
    request: Request,
    db: Session = Depends(get_db),
    authenticator: Authenticator = Depends(get_authenticator)
):
    try:
        user, token = service.login(db, authenticator, payload.identifier, payload.secret)
    except InvalidCredentials:
        log_auth_event("login_failure", request, payload.identifier)
        raise

    log_auth_event("login_success", request, user.username, user.id)
    return TokenEnvelope(message=f"Utilisateur {user.username} connecté !", token=token)


@router.post("/logout", response_model=Envelope)
def logout(payload: TokenIn, request: Request, db: Session = Depends(get_db)):
    service.logout(db, payload.token)
    log_auth_event("logout", request)
    return Envelope(message="Utilisateur déconnecté !")


@router.post("/verify", response_model=VerifyEnvelope)
def verify(
    payload: TokenIn,
    request: Request,
    db: Session = Depends(get_db),
    authenticator: Authenticator = Depends(get_authenticator)
):
    try:
        user = service.verify_token(db, authenticator, payload.token)
    except UnknownToken:
        log_auth_event("token_rejected", request)
        raise

    return VerifyEnvelope(
        message="token validé !",
        utilisateur=UserInfo(**user.to_dict())
    )


@router.patch("/update", response_model=Envelope)
def update(
    payload: UpdateIn,
    request: Request,
    db: Session = Depends(get_db),
    authenticator: Authenticator = Depends(get_authenticator)
):
    user = service.update_credentials(
        db,
        authenticator,
        payload.token,
        payload.id,
        new_identifier=payload.identifier,
        new_secret=payload.secret
    )
    log_auth_event("credentials_updated", request, user.username, user.id)
    return Envelope(message="Les modifications ont bien été effectuées")
