# storefront/api/routers/products.py
from typing import List
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from storefront.api.deps import require_admin
from storefront.data.database import get_db
from storefront.domain.identity import UserIdentity
from storefront.domain.schemas import ProductIn, ProductUpdate, ProductOut, ProductListOut
from storefront.services.product_service import ProductService

router = APIRouter(prefix="/products", tags=["products"])


@router.get("", response_model=ProductListOut)
def list_products(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    category: str | None = None,
    featured: bool | None = None,
    db: Session = Depends(get_db),
):
    return ProductService(db).list_products(page, limit, category, featured)


@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: str, db: Session = Depends(get_db)):
    return ProductService(db).get_product(product_id)


@router.get("/{product_id}/related", response_model=List[ProductOut])
def get_related_products(
    product_id: str,
    limit: int = Query(4, ge=1, le=20),
    db: Session = Depends(get_db),
):
    return ProductService(db).get_related_products(product_id, limit)


@router.post("", response_model=ProductOut, status_code=201)
def create_product(
    payload: ProductIn,
    _admin: UserIdentity = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return ProductService(db).create_product(payload)


@router.put("/{product_id}", response_model=ProductOut)
def update_product(
    product_id: str,
    payload: ProductUpdate,
    _admin: UserIdentity = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return ProductService(db).update_product(product_id, payload)


@router.delete("/{product_id}", status_code=204)
def delete_product(
    product_id: str,
    _admin: UserIdentity = Depends(require_admin),
    db: Session = Depends(get_db),
):
    ProductService(db).delete_product(product_id)
