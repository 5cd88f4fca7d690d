# storefront/domain/identity.py
from dataclasses import dataclass


@dataclass(frozen=True)
class SessionIdentity:
    """Anonimowa sesja koszyka (cookie), niezależna od logowania."""

    session_id: str


@dataclass(frozen=True)
class UserIdentity:
    """Zweryfikowany użytkownik z tokena JWT."""

    user_id: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
