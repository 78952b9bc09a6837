from passlib.context import CryptContext
from datetime import datetime, timedelta
import uuid
import jwt

from .config import Settings


class Authenticator:
    """
    Password hashing and token signing bound to one configuration.

    Hashing is deliberately slow; callers run it from synchronous route
    handlers, which FastAPI dispatches to its worker thread pool.
    """

    def __init__(self, settings: Settings):
        self.secret_key = settings.JWT_SECRET
        self.algorithm = settings.JWT_ALGORITHM
        self.token_lifetime = timedelta(seconds=settings.TOKEN_LIFETIME_SECONDS)
        # Use pbkdf2_sha256 to avoid external bcrypt backend issues in some environments
        self.pwd_context = CryptContext(
            schemes=["pbkdf2_sha256"],
            deprecated="auto",
            pbkdf2_sha256__default_rounds=settings.HASH_ROUNDS
        )

    def hash_password(self, password: str) -> str:
        return self.pwd_context.hash(password)

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        return self.pwd_context.verify(plain_password, hashed_password)

    def dummy_verify(self) -> None:
        """Spend the same time as a real verification, for unknown users."""
        self.pwd_context.dummy_verify()

    def create_access_token(self, username: str, now: datetime = None) -> tuple[str, datetime]:
        """
        Sign a token for ``username``.

        Returns the token and its expiry instant (naive UTC). Every token
        carries a random ``jti`` so two tokens issued in the same second
        for the same user still differ.
        """
        issued_at = now or datetime.utcnow()
        expire = issued_at + self.token_lifetime
        payload = {
            "sub": username,
            "iat": issued_at,
            "exp": expire,
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm), expire

    def decode_access_token(self, token: str) -> dict:
        """Check the signature and expiry. Raises jwt.InvalidTokenError."""
        return jwt.decode(token, self.secret_key, algorithms=[self.algorithm])

    def signature_is_valid(self, token: str) -> bool:
        try:
            self.decode_access_token(token)
        except jwt.InvalidTokenError:
            return False
        return True
