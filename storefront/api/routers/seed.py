# storefront/api/routers/seed.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from storefront.api.deps import get_optional_user
from storefront.data.database import get_db
from storefront.data.seed import seed_catalog
from storefront.domain.errors import Forbidden, Unauthorized
from storefront.domain.identity import UserIdentity
from storefront.domain.schemas import SeedOut
from storefront.repos.user_repo import UserRepo
from storefront.utils.settings import is_production

router = APIRouter(prefix="/seed", tags=["seed"])


@router.post("", response_model=SeedOut)
def seed(
    force: bool = Query(False),
    user: UserIdentity | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    """
    Wrzuca przykładowe produkty gdy katalog pusty.
    force=true najpierw kasuje produkty, zamówienia, koszyki i userów.
    """
    if force:
        if is_production():
            raise Forbidden("Reset bazy niedostępny na produkcji")
        #pusta baza (pierwsze uruchomienie) nie ma jeszcze admina
        if UserRepo(db).count() > 0:
            if user is None:
                raise Unauthorized("Reset bazy wymaga logowania")
            if not user.is_admin:
                raise Forbidden("Reset bazy wymaga uprawnień admina")
    return seed_catalog(db, force=force)
