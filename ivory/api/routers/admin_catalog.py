# ivory/api/routers/admin_catalog.py
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session

from ivory.api.deps import get_media_client, require_admin
from ivory.data.database import get_db
from ivory.domain.schemas import (
    CollectionCountsOut,
    CollectionEnvelope,
    CollectionIn,
    MessageOut,
    ProductEnvelope,
    ProductsOut,
)
from ivory.services.catalog_service import CatalogService
from ivory.utils.settings import MAX_IMAGE_BYTES

router = APIRouter(prefix="/admin", tags=["admin-catalog"], dependencies=[Depends(require_admin)])


def get_service(db: Session = Depends(get_db), media_client=Depends(get_media_client)):
    return CatalogService(db, media_client=media_client)


def _read_image(image: UploadFile | None):
    # browsers send an empty part when no file is picked
    if image is None or not image.filename:
        return None, None
    # one byte past the limit is enough for the size check
    return image.file.read(MAX_IMAGE_BYTES + 1), image.filename


# ---------------------------------------------------------------- collections


@router.get("/collections", response_model=CollectionCountsOut)
def list_collections(svc: CatalogService = Depends(get_service)):
    return {"data": svc.list_collections_with_counts()}


@router.post("/collections", response_model=CollectionEnvelope, status_code=201)
def create_collection(payload: CollectionIn, svc: CatalogService = Depends(get_service)):
    return {"data": svc.create_collection(payload)}


@router.put("/collections/{collection_id}", response_model=CollectionEnvelope)
def update_collection(collection_id: int, payload: CollectionIn, svc: CatalogService = Depends(get_service)):
    return {"data": svc.update_collection(collection_id, payload)}


@router.delete("/collections/{collection_id}", response_model=MessageOut)
def delete_collection(collection_id: int, svc: CatalogService = Depends(get_service)):
    svc.delete_collection(collection_id)
    return {"message": "Collection and its products deleted"}


# ---------------------------------------------------------------- products


@router.get("/products", response_model=ProductsOut)
def list_products(svc: CatalogService = Depends(get_service)):
    return {"data": svc.list_products()}


@router.post("/products", response_model=ProductEnvelope, status_code=201)
def create_product(
    name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    quantity: Optional[int] = Form(None),
    collection_id: Optional[int] = Form(None, alias="collectionId"),
    image: Optional[UploadFile] = File(None),
    svc: CatalogService = Depends(get_service),
):
    content, filename = _read_image(image)
    return {"data": svc.create_product(name, description, price, quantity, collection_id, content, filename)}


@router.put("/products/{product_id}", response_model=ProductEnvelope)
def update_product(
    product_id: int,
    name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    quantity: Optional[int] = Form(None),
    collection_id: Optional[int] = Form(None, alias="collectionId"),
    image: Optional[UploadFile] = File(None),
    svc: CatalogService = Depends(get_service),
):
    content, filename = _read_image(image)
    return {
        "data": svc.update_product(product_id, name, description, price, quantity, collection_id, content, filename)
    }


@router.delete("/products/{product_id}", response_model=MessageOut)
def delete_product(product_id: int, svc: CatalogService = Depends(get_service)):
    svc.delete_product(product_id)
    return {"message": "Product deleted"}
