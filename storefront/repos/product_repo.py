# storefront/repos/product_repo.py
from typing import Iterable, List, Dict
from sqlalchemy import select, update, func
from sqlalchemy.orm import Session
from storefront.data.models.product import ProductModel


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_product(self, product_id: str) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def get_products_by_ids(self, product_ids: Iterable[str]) -> Dict[str, ProductModel]:
        ids = list(set(product_ids))
        if not ids:
            return {}
        rows = self.db.execute(
            select(ProductModel).where(ProductModel.id.in_(ids))
        ).scalars().all()
        return {p.id: p for p in rows}

    def list_products(
        self,
        offset: int,
        limit: int,
        category: str | None = None,
        featured: bool | None = None,
    ) -> tuple[List[ProductModel], int]:
        query = select(ProductModel)
        count_query = select(func.count()).select_from(ProductModel)
        if category:
            query = query.where(ProductModel.category == category)
            count_query = count_query.where(ProductModel.category == category)
        if featured is not None:
            query = query.where(ProductModel.featured == featured)
            count_query = count_query.where(ProductModel.featured == featured)

        rows = self.db.execute(
            query.order_by(ProductModel.created_at.desc()).offset(offset).limit(limit)
        ).scalars().all()
        total = self.db.execute(count_query).scalar_one()
        return list(rows), total

    def related(self, category: str, exclude_id: str, limit: int) -> List[ProductModel]:
        return list(
            self.db.execute(
                select(ProductModel)
                .where(ProductModel.category == category, ProductModel.id != exclude_id)
                .order_by(ProductModel.created_at.desc())
                .limit(limit)
            ).scalars().all()
        )

    def list_all(self) -> List[ProductModel]:
        return list(self.db.execute(select(ProductModel)).scalars().all())

    def low_stock(self, threshold: int, limit: int) -> List[ProductModel]:
        return list(
            self.db.execute(
                select(ProductModel)
                .where(ProductModel.stock < threshold)
                .order_by(ProductModel.stock.asc())
                .limit(limit)
            ).scalars().all()
        )

    def count(self) -> int:
        return self.db.execute(select(func.count()).select_from(ProductModel)).scalar_one()

    def add(self, product: ProductModel) -> ProductModel:
        self.db.add(product)
        self.db.flush()
        return product

    def delete(self, product: ProductModel) -> None:
        self.db.delete(product)

    def decrement_stock(self, product_id: str, quantity: int) -> int:
        """
        Warunkowy update: UPDATE products SET stock = stock - q WHERE id = ? AND stock >= q
        zwraca rowcount, 0 = za mało na stanie (albo produkt nie istnieje)
        """
        result = self.db.execute(
            update(ProductModel)
            .where(ProductModel.id == product_id, ProductModel.stock >= quantity)
            .values(stock=ProductModel.stock - quantity)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def commit(self):
        self.db.commit()
