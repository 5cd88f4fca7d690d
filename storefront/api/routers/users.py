from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session
from storefront.api.deps import get_current_user, get_session_identity
from storefront.data.database import get_db
from storefront.domain.identity import SessionIdentity, UserIdentity
from storefront.domain.schemas import UserCreate, LoginIn, UserRead
from storefront.services.cart_service import CartService
from storefront.services.user_service import UserService
from storefront.utils.settings import AUTH_COOKIE_NAME, JWT_EXPIRES_DAYS, is_production

router = APIRouter(prefix="/auth", tags=["auth"])


def _set_token(response: Response, token: str):
    response.set_cookie(
        AUTH_COOKIE_NAME,
        token,
        max_age=JWT_EXPIRES_DAYS * 24 * 60 * 60,
        httponly=True,
        secure=is_production(),
        samesite="strict",
    )


@router.post("/register", response_model=UserRead, status_code=201)
def register(payload: UserCreate, response: Response, db: Session = Depends(get_db)):
    user, token = UserService(db).register(payload)
    _set_token(response, token)
    return user


@router.post("/login", response_model=UserRead)
def login(
    payload: LoginIn,
    response: Response,
    session: SessionIdentity = Depends(get_session_identity),
    db: Session = Depends(get_db),
):
    user, token = UserService(db).login(payload)
    #koszyk anonimowej sesji łączony z koszykiem usera
    CartService(db).merge_into_session(session, UserIdentity(user_id=user.id, role=user.role))
    _set_token(response, token)
    return user


@router.post("/logout", status_code=204)
def logout(response: Response):
    response.delete_cookie(AUTH_COOKIE_NAME)


@router.get("/me", response_model=UserRead)
def me(user: UserIdentity = Depends(get_current_user), db: Session = Depends(get_db)):
    return UserService(db).get_user(user.user_id)
