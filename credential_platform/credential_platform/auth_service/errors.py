"""
Error taxonomy and the handlers that turn every failure into an error envelope.
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError, SQLAlchemyError

logger = logging.getLogger(__name__)

STATUS_ERROR = "Erreur"


class CredentialError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Erreur du serveur, veuillez réessayer ultérieurement"

    def __init__(self, message: str = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class InvalidInput(CredentialError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "JSON incorrect"


class InvalidCredentials(CredentialError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Identifiants incorrects"


class UnknownToken(CredentialError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Jeton inconnu"


class Forbidden(CredentialError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Action non autorisée"


class DuplicateIdentifier(CredentialError):
    status_code = status.HTTP_409_CONFLICT
    message = "Nom d'utilisateur déjà utilisé"


class ServiceUnavailable(CredentialError):
    message = "Impossible de joindre le serveur de la base de données"


class InternalError(CredentialError):
    pass


def error_envelope(exc: CredentialError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"statut": STATUS_ERROR, "message": exc.message}
    )


async def credential_error_handler(_request: Request, exc: CredentialError) -> JSONResponse:
    return error_envelope(exc)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("Rejected malformed body on %s: %s", request.url.path, exc.errors())
    return error_envelope(InvalidInput())


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    if isinstance(exc, OperationalError):
        logger.error("Store unavailable on %s: %s", request.url.path, exc)
        return error_envelope(ServiceUnavailable())
    logger.error("Database error on %s", request.url.path, exc_info=exc)
    return error_envelope(InternalError())


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error on %s", request.url.path, exc_info=exc)
    return error_envelope(InternalError())


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CredentialError, credential_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
