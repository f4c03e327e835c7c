"""
Password hashing, signed bearer tokens, and the register/login flow.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt
import jwt

from app.core.abstractions import UserRepository
from app.errors import InvalidCredentialsError, InvalidTokenError
from app.models import CurrentUser, UserAccount

logger = logging.getLogger(__name__)

TOKEN_ALGORITHM = "HS256"
BCRYPT_ROUNDS = 10


def hash_password(password: str) -> str:
    hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=BCRYPT_ROUNDS))
    return hashed.decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def issue_token(user: UserAccount, secret: str, expires_hours: int = 2) -> str:
    payload = {
        "id": user.id,
        "username": user.username,
        "exp": datetime.now(timezone.utc) + timedelta(hours=expires_hours),
    }
    return jwt.encode(payload, secret, algorithm=TOKEN_ALGORITHM)


def decode_token(token: str, secret: str) -> CurrentUser:
    try:
        claims: dict[str, Any] = jwt.decode(token, secret, algorithms=[TOKEN_ALGORITHM])
    except jwt.PyJWTError as e:
        raise InvalidTokenError(str(e)) from e
    if not claims.get("id") or not claims.get("username"):
        raise InvalidTokenError("Token is missing user claims")
    return CurrentUser(id=str(claims["id"]), username=str(claims["username"]))


class AuthService:
    def __init__(self, users: UserRepository, secret: str, expires_hours: int = 2) -> None:
        self.users = users
        self.secret = secret
        self.expires_hours = expires_hours

    async def register(self, username: str, password: str) -> UserAccount:
        """Create an account. Raises UserExistsError for a taken username."""
        user = UserAccount(username=username, password=hash_password(password))
        await self.users.add_user(user)
        logger.info("Registered user %s", username)
        return user

    async def login(self, username: str, password: str) -> dict[str, Any]:
        user = await self.users.get_user(username)
        if user is None or not verify_password(password, user.password):
            raise InvalidCredentialsError("Invalid credentials")
        token = issue_token(user, self.secret, self.expires_hours)
        return {"token": token, "user": {"id": user.id, "username": user.username}}
