# storefront/api/deps.py
import uuid

import jwt
from fastapi import Depends, Request, Response

from storefront.domain.errors import Unauthorized, Forbidden
from storefront.domain.identity import SessionIdentity, UserIdentity
from storefront.services.lock_service import LockService
from storefront.services.payment_gateway import PaymentGateway
from storefront.utils.security import decode_access_token
from storefront.utils.settings import (
    AUTH_COOKIE_NAME,
    SESSION_COOKIE_NAME,
    SESSION_COOKIE_MAX_AGE,
    is_production,
)


def get_session_identity(request: Request, response: Response) -> SessionIdentity:
    """Anonimowa sesja koszyka, tworzona leniwie przy pierwszym requescie."""
    session_id = request.cookies.get(SESSION_COOKIE_NAME)
    if not session_id:
        session_id = uuid.uuid4().hex
        response.set_cookie(
            SESSION_COOKIE_NAME,
            session_id,
            max_age=SESSION_COOKIE_MAX_AGE,
            httponly=True,
            secure=is_production(),
            samesite="lax",
        )
    return SessionIdentity(session_id=session_id)


def _read_token(request: Request) -> str | None:
    #nagłówek ma pierwszeństwo przed cookie
    auth = request.headers.get("Authorization", "")
    if auth.startswith("Bearer "):
        return auth[len("Bearer "):]
    return request.cookies.get(AUTH_COOKIE_NAME)


def get_optional_user(request: Request) -> UserIdentity | None:
    token = _read_token(request)
    if not token:
        return None
    try:
        claims = decode_access_token(token)
    except jwt.InvalidTokenError:
        return None
    return UserIdentity(user_id=claims["sub"], role=claims.get("role", "customer"))


def get_current_user(request: Request) -> UserIdentity:
    token = _read_token(request)
    if not token:
        raise Unauthorized("Brak tokena")
    try:
        claims = decode_access_token(token)
    except jwt.InvalidTokenError as e:
        raise Unauthorized("Niepoprawny token") from e
    return UserIdentity(user_id=claims["sub"], role=claims.get("role", "customer"))


def require_admin(user: UserIdentity = Depends(get_current_user)) -> UserIdentity:
    if not user.is_admin:
        raise Forbidden("Wymagane uprawnienia admina")
    return user


def get_payment_gateway() -> PaymentGateway:
    return PaymentGateway()


def get_lock_service() -> LockService:
    return LockService()
