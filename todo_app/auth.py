# PURPOSE: password hashing, JWT issue/verify, sign-out, and the current-user dependency.

import uuid
from datetime import UTC, datetime, timedelta
from typing import Any, Dict

import bcrypt
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from .config import settings
from .db import get_db
from .db_models import RevokedTokenDB, UserDB
from .models import UserPublic

# OAuth2 password flow
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")


# --- Password helpers (bcrypt, no passlib) ---

def hash_password(password: str) -> str:
    """Return a bcrypt hash for the given plain password."""
    if not isinstance(password, str):
        raise TypeError("password must be a string")
    salt = bcrypt.gensalt()
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    """Verify a plain password against its bcrypt hash."""
    try:
        return bcrypt.checkpw(
            plain_password.encode("utf-8"),
            password_hash.encode("utf-8"),
        )
    except ValueError:
        # malformed hash
        return False


# --- JWT helpers ---

def _now_utc() -> datetime:
    return datetime.now(UTC)


def create_access_token(subject: str | Dict[str, Any]) -> str:
    """
    Create a signed JWT for a user.
    - `subject` can be email (str) or payload dict; we always include `sub`.
    - Every token gets a unique `jti` so it can be revoked on sign-out.
    """
    if isinstance(subject, str):
        payload: Dict[str, Any] = {"sub": subject}
    else:
        payload = {**subject}
        payload.setdefault("sub", subject.get("email") or subject.get("sub"))

    expire = _now_utc() + timedelta(minutes=settings.JWT_EXPIRE_MIN)
    payload.update({"exp": expire, "jti": uuid.uuid4().hex})
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    """Return the token claims; raises JWTError on bad signature or expiry."""
    return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])


def revoke_token(db: Session, claims: Dict[str, Any]) -> None:
    """Record the token's jti so it is rejected from now on."""
    jti = claims.get("jti")
    if not jti or db.get(RevokedTokenDB, jti) is not None:
        return
    expires_at = datetime.fromtimestamp(claims["exp"], UTC)
    db.add(RevokedTokenDB(jti=jti, expires_at=expires_at))
    db.commit()


def get_current_user(token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> UserPublic:
    """Decode JWT, reject revoked tokens, load user by email (sub)."""
    cred_error = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = decode_access_token(token)
        subject = payload.get("sub")
        if subject is None:
            raise cred_error
    except JWTError:
        raise cred_error

    jti = payload.get("jti")
    if jti and db.get(RevokedTokenDB, jti) is not None:
        raise cred_error

    row = db.query(UserDB).filter(UserDB.email == subject).one_or_none()
    if row is None:
        raise cred_error

    return UserPublic.model_validate(row)
