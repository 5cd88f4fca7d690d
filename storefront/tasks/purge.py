# storefront/tasks/purge.py
from datetime import timedelta
from sqlalchemy import select
from sqlalchemy.orm import Session
from storefront.celery_worker import celery_app
from storefront.data.database import SessionLocal
from storefront.data.models._common import utcnow
from storefront.data.models.cart import CartModel
from storefront.utils.settings import STALE_CART_DAYS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def purge_stale_carts(db: Session, max_age_days: int = STALE_CART_DAYS) -> int:
    """
    Usuwa anonimowe koszyki nieruszane dłużej niż max_age_days
    (tyle żyje cookie sesji, potem nikt już do nich nie trafi).
    Koszyki przypisane do usera zostają, wrócą przy logowaniu.
    """
    cutoff = utcnow() - timedelta(days=max_age_days)
    carts = db.execute(
        select(CartModel).where(
            CartModel.user_id.is_(None),
            CartModel.updated_at < cutoff,
        )
    ).scalars().all()

    logger.info(f"Found {len(carts)} stale carts to purge")

    for cart in carts:
        db.delete(cart)

    db.commit()
    return len(carts)


@celery_app.task(name="storefront.tasks.purge.purge_stale_carts_task")
def purge_stale_carts_task():
    logger.info("Purge stale carts task started")
    db = SessionLocal()
    try:
        return purge_stale_carts(db)
    finally:
        db.close()
