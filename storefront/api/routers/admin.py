# storefront/api/routers/admin.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from storefront.api.deps import require_admin
from storefront.data.database import get_db
from storefront.domain.identity import UserIdentity
from storefront.domain.schemas import DashboardOut
from storefront.services.admin_service import AdminService

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/dashboard", response_model=DashboardOut)
def dashboard(
    _admin: UserIdentity = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return AdminService(db).dashboard_summary()
