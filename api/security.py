# api/security.py

import os
from datetime import datetime, timedelta, timezone
from typing import Optional

from dotenv import load_dotenv
from jose import JWTError, jwt
from passlib.context import CryptContext

from skill_system.models import UserRole
from skill_system.session import SessionContext

load_dotenv()

SECRET_KEY = os.getenv("SECRET_KEY")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 30))

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(user_id: str, expires_delta: Optional[timedelta] = None) -> str:
    """
    Signs a token naming the user. The role is not part of the token; it is
    read from the users table on every request.
    """
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    return jwt.encode({"sub": user_id, "exp": expire}, SECRET_KEY, algorithm=ALGORITHM)


def read_token_subject(token: str) -> str:
    """The user id a valid token was issued for. Raises JWTError otherwise."""
    payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    user_id = payload.get("sub")
    if not user_id:
        raise JWTError("Token has no subject")
    return user_id


def session_context_for(user) -> SessionContext:
    """Builds the caller identity the skill core checks permissions against.

    ``user`` is a users-table row or a schemas.User; unknown roles fall back
    to Member so a bad row can never grant admin rights.
    """
    try:
        role = UserRole(user.role)
    except ValueError:
        role = UserRole.MEMBER
    return SessionContext(user_id=user.id, role=role)
