# ivory/api/routers/products.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ivory.data.database import get_db
from ivory.domain.schemas import CollectionsOut, ProductEnvelope, ProductsOut
from ivory.services.catalog_service import CatalogService

router = APIRouter(prefix="/products", tags=["products"])


@router.get("", response_model=ProductsOut)
def list_products(db: Session = Depends(get_db)):
    return {"data": CatalogService(db).list_products()}


@router.get("/search", response_model=ProductsOut)
def search_products(query: str = Query(""), db: Session = Depends(get_db)):
    return {"data": CatalogService(db).search_products(query)}


@router.get("/collections", response_model=CollectionsOut)
def list_collections(db: Session = Depends(get_db)):
    return {"data": CatalogService(db).list_collections()}


@router.get("/{product_id}", response_model=ProductEnvelope)
def get_product(product_id: int, db: Session = Depends(get_db)):
    return {"data": CatalogService(db).get_product(product_id)}
