# storefront/repos/order_repo.py
from typing import List
from sqlalchemy import select, func, or_
from sqlalchemy.orm import Session, selectinload
from storefront.data.models.order import OrderModel


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def add_order(self, order: OrderModel) -> OrderModel:
        #bez commita, commit robi serwis po całej jednostce pracy
        self.db.add(order)
        self.db.flush()
        return order

    def get_order(self, order_id: str) -> OrderModel | None:
        return self.db.get(OrderModel, order_id)

    def get_order_by_payment(self, payment_id: str) -> OrderModel | None:
        return self.db.execute(
            select(OrderModel).where(OrderModel.payment_id == payment_id)
        ).scalar_one_or_none()

    def list_orders(self, offset: int, limit: int, user_id: str | None = None) -> tuple[List[OrderModel], int]:
        query = select(OrderModel).options(selectinload(OrderModel.items))
        count_query = select(func.count()).select_from(OrderModel)
        if user_id is not None:
            query = query.where(OrderModel.user_id == user_id)
            count_query = count_query.where(OrderModel.user_id == user_id)

        rows = self.db.execute(
            query.order_by(OrderModel.created_at.desc()).offset(offset).limit(limit)
        ).scalars().all()
        total = self.db.execute(count_query).scalar_one()
        return list(rows), total

    def latest_for(self, user_id: str | None = None, session_id: str | None = None) -> OrderModel | None:
        conditions = []
        if user_id:
            conditions.append(OrderModel.user_id == user_id)
        if session_id:
            conditions.append(OrderModel.session_id == session_id)
        if not conditions:
            return None

        return self.db.execute(
            select(OrderModel)
            .options(selectinload(OrderModel.items))
            .where(or_(*conditions))
            .order_by(OrderModel.created_at.desc())
            .limit(1)
        ).scalars().first()

    def list_all(self) -> List[OrderModel]:
        return list(
            self.db.execute(
                select(OrderModel).options(selectinload(OrderModel.items))
            ).scalars().all()
        )

    def recent(self, limit: int) -> List[OrderModel]:
        return list(
            self.db.execute(
                select(OrderModel)
                .options(selectinload(OrderModel.items))
                .order_by(OrderModel.created_at.desc())
                .limit(limit)
            ).scalars().all()
        )

    def count(self) -> int:
        return self.db.execute(select(func.count()).select_from(OrderModel)).scalar_one()

    def update_order_status(self, order_id: str, status: str) -> OrderModel | None:
        order = self.get_order(order_id)
        if order:
            order.status = status
            self.db.commit()
            self.db.refresh(order)
        return order

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
