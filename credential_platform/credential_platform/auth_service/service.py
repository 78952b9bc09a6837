"""
Credential and session operations.

Each function works on a request-scoped SQLAlchemy session and raises a
``CredentialError`` subclass on failure. Route handlers turn the results
into envelopes.
"""
from datetime import datetime
from typing import Optional
import logging

from passlib.exc import PasswordSizeError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .auth import Authenticator
from .errors import DuplicateIdentifier, Forbidden, InvalidCredentials, InvalidInput, UnknownToken
from .models import MAX_IDENTIFIER_LENGTH, SessionToken, User

logger = logging.getLogger(__name__)


def hash_secret(authenticator: Authenticator, secret: str) -> str:
    """Hash a new secret; secrets passlib refuses to hash are invalid input."""
    try:
        return authenticator.hash_password(secret)
    except PasswordSizeError as exc:
        raise InvalidInput() from exc


def issue_session(db: Session, user: User, authenticator: Authenticator) -> str:
    """Sign a token for ``user`` and stage its session row. The caller commits."""
    token, expires_at = authenticator.create_access_token(user.username)
    db.add(SessionToken(token=token, user_id=user.id, expires_at=expires_at))
    return token


def register(db: Session, authenticator: Authenticator, identifier: Optional[str],
             secret: Optional[str]) -> tuple[User, str]:
    if not identifier or not secret or len(identifier) > MAX_IDENTIFIER_LENGTH:
        raise InvalidInput()

    user = User(username=identifier, password=hash_secret(authenticator, secret))
    db.add(user)
    try:
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        logger.info("Registration rejected, identifier already taken: %s", identifier)
        raise DuplicateIdentifier() from exc

    token = issue_session(db, user, authenticator)
    db.commit()
    logger.info("Registered user_id=%s username=%s", user.id, user.username)
    return user, token


def login(db: Session, authenticator: Authenticator, identifier: Optional[str],
          secret: Optional[str]) -> tuple[User, str]:
    if not identifier or not secret:
        raise InvalidInput()

    user = db.query(User).filter(User.username == identifier).first()
    if not user:
        authenticator.dummy_verify()
        raise InvalidCredentials()
    try:
        valid = authenticator.verify_password(secret, user.password)
    except PasswordSizeError:
        valid = False
    if not valid:
        raise InvalidCredentials()

    token = issue_session(db, user, authenticator)
    db.commit()
    return user, token


def verify_token(db: Session, authenticator: Authenticator, token: Optional[str]) -> User:
    """
    Resolve a token to its user.

    A token is accepted only when its signature verifies and a session row
    for it exists with an expiry strictly in the future. Verification never
    extends the expiry.
    """
    if not token:
        raise InvalidInput()
    if not authenticator.signature_is_valid(token):
        raise UnknownToken()

    user = (
        db.query(User)
        .join(SessionToken, SessionToken.user_id == User.id)
        .filter(SessionToken.token == token, SessionToken.expires_at > datetime.utcnow())
        .first()
    )
    if user is None:
        raise UnknownToken()
    return user


def logout(db: Session, token: Optional[str]) -> None:
    if not token:
        raise InvalidInput()

    deleted = (
        db.query(SessionToken)
        .filter(SessionToken.token == token)
        .delete(synchronize_session=False)
    )
    db.commit()
    if deleted == 0:
        raise UnknownToken()


def update_credentials(db: Session, authenticator: Authenticator, token: Optional[str],
                       user_id: Optional[int], new_identifier: Optional[str] = None,
                       new_secret: Optional[str] = None) -> User:
    """
    Change the identifier and/or secret of the token's own user.

    ``user_id`` must name the user the token belongs to. Both changes are
    committed together or not at all.
    """
    user = verify_token(db, authenticator, token)

    if not user_id or user_id < 1:
        raise InvalidInput()
    if not new_identifier and not new_secret:
        raise InvalidInput()
    if new_identifier and len(new_identifier) > MAX_IDENTIFIER_LENGTH:
        raise InvalidInput()
    if user_id != user.id:
        logger.warning("Update of user_id=%s refused for token of user_id=%s", user_id, user.id)
        raise Forbidden()

    hashed = hash_secret(authenticator, new_secret) if new_secret else None

    if new_identifier:
        user.username = new_identifier
    if hashed:
        user.password = hashed
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise DuplicateIdentifier() from exc
    return user
