from typing import Tuple
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from storefront.data.models.user import UserModel
from storefront.domain.errors import NotFound, Unauthorized, ValidationError
from storefront.domain.schemas import UserCreate, LoginIn, UserRead
from storefront.repos.user_repo import UserRepo
from storefront.utils.security import hash_password, verify_password, create_access_token
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class UserService:
    def __init__(self, db: Session):
        self.repo = UserRepo(db)

    def register(self, payload: UserCreate) -> Tuple[UserRead, str]:
        email = payload.email.lower()
        if self.repo.get_user_by_email(email):
            raise ValidationError(
                "Użytkownik z tym adresem już istnieje",
                fields={"email": "adres zajęty"},
            )

        user = UserModel(
            name=payload.name.strip(),
            email=email,
            password_hash=hash_password(payload.password),
            role="customer",
        )
        try:
            created = self.repo.create_user(user)
        except IntegrityError:
            self.repo.db.rollback()
            raise ValidationError("Użytkownik z tym adresem już istnieje", fields={"email": "adres zajęty"})

        logger.info(f"Registered user {created.id}")
        return UserRead.model_validate(created), create_access_token(created.id, created.role)

    def login(self, payload: LoginIn) -> Tuple[UserRead, str]:
        user = self.repo.get_user_by_email(payload.email)
        if not user or not verify_password(payload.password, user.password_hash):
            raise Unauthorized("Niepoprawne dane logowania")

        logger.info(f"User {user.id} logged in")
        return UserRead.model_validate(user), create_access_token(user.id, user.role)

    def get_user(self, user_id: str) -> UserRead:
        user = self.repo.get_user(user_id)
        if not user:
            raise NotFound("User not found")
        return UserRead.model_validate(user)
