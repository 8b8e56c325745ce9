"""Password hashing, token issue and the auth gate dependencies."""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, Header, Request
from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import ValidationError

from errors import Forbidden, Unauthorized
from schemas import Role, TokenClaims

log = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def verify_password(plain_password, hashed_password):
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password):
    return pwd_context.hash(password)


def create_access_token(data: dict, secret_key: str, algorithm: str = "HS256",
                        expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()
    issued = datetime.now(timezone.utc)
    expire = issued + (expires_delta or timedelta(days=1))
    to_encode.update({"iat": issued, "exp": expire})
    return jwt.encode(to_encode, secret_key, algorithm=algorithm)


def decode_access_token(token: str, secret_key: str, algorithm: str = "HS256") -> TokenClaims:
    try:
        payload = jwt.decode(token, secret_key, algorithms=[algorithm])
        return TokenClaims(**payload)
    except (JWTError, ValidationError):
        raise Unauthorized("Invalid token")


def verify_token(request: Request, authorization: Optional[str] = Header(None)) -> TokenClaims:
    """Check the bearer token and attach its claims to ``request.state.user``."""
    if not authorization:
        raise Unauthorized("Access denied, no token provided")

    parts = authorization.split(" ")
    token = parts[1] if len(parts) > 1 else None
    if not token:
        raise Unauthorized("No token provided")

    config = request.app.state.config
    claims = decode_access_token(token, config.JWT_SECRET, config.JWT_ALGORITHM)
    request.state.user = claims
    return claims


def require_role(*roles: Role):
    """Dependency that runs after ``verify_token`` and gates on the role claim."""
    def dependency(claims: TokenClaims = Depends(verify_token)) -> TokenClaims:
        if claims.role not in roles:
            if roles == (Role.admin,):
                raise Forbidden("Access denied. Admins only.")
            allowed = ", ".join(r.value for r in roles)
            raise Forbidden(f"Access denied. Requires role: {allowed}")
        return claims
    return dependency


def guard(*roles: Role):
    """
    Per-endpoint auth declaration.

    With ``ENFORCE_AUTH`` off the declaration is recorded but not checked.
    With it on, a valid token is required and, when roles are given, the
    token's role must pass ``require_role``.
    """
    role_check = require_role(*roles) if roles else None

    def dependency(request: Request, authorization: Optional[str] = Header(None)) -> Optional[TokenClaims]:
        if not request.app.state.config.ENFORCE_AUTH:
            return None
        claims = verify_token(request, authorization)
        if role_check is not None:
            claims = role_check(claims)
        return claims
    return dependency
