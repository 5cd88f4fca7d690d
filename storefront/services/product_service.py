# storefront/services/product_service.py
from typing import Dict, Any, List
from sqlalchemy.orm import Session
from storefront.data.models.product import ProductModel
from storefront.domain.errors import NotFound
from storefront.domain.schemas import ProductIn, ProductUpdate, ProductOut
from storefront.repos.product_repo import ProductRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class ProductService:
    def __init__(self, db: Session):
        self.repo = ProductRepo(db)

    def list_products(
        self,
        page: int = 1,
        limit: int = 10,
        category: str | None = None,
        featured: bool | None = None,
    ) -> Dict[str, Any]:
        products, total = self.repo.list_products(
            offset=(page - 1) * limit,
            limit=limit,
            category=category,
            featured=featured,
        )
        return {
            "products": [ProductOut.model_validate(p) for p in products],
            "pagination": {
                "total": total,
                "page": page,
                "limit": limit,
                "pages": -(-total // limit),
            },
        }

    def get_product(self, product_id: str) -> ProductOut:
        product = self.repo.get_product(product_id)
        if not product:
            raise NotFound("Produkt nie istnieje")
        return ProductOut.model_validate(product)

    def get_related_products(self, product_id: str, limit: int = 4) -> List[ProductOut]:
        """Produkty z tej samej kategorii, bez samego produktu."""
        product = self.repo.get_product(product_id)
        if not product:
            raise NotFound("Produkt nie istnieje")
        related = self.repo.related(product.category, product.id, limit)
        return [ProductOut.model_validate(p) for p in related]

    def create_product(self, payload: ProductIn) -> ProductOut:
        product = self.repo.add(ProductModel(**payload.model_dump()))
        self.repo.commit()
        logger.info(f"Product {product.id} created")
        return ProductOut.model_validate(product)

    def update_product(self, product_id: str, payload: ProductUpdate) -> ProductOut:
        product = self.repo.get_product(product_id)
        if not product:
            raise NotFound("Produkt nie istnieje")

        for field, value in payload.model_dump(exclude_unset=True).items():
            if value is None and field != "image":
                continue
            setattr(product, field, value)

        self.repo.commit()
        self.repo.db.refresh(product)
        logger.info(f"Product {product_id} updated")
        return ProductOut.model_validate(product)

    def delete_product(self, product_id: str) -> None:
        product = self.repo.get_product(product_id)
        if not product:
            raise NotFound("Produkt nie istnieje")

        #pozycje koszyków zostają, odfiltruje je odczyt koszyka
        self.repo.delete(product)
        self.repo.commit()
        logger.info(f"Product {product_id} deleted")
