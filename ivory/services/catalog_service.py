# ivory/services/catalog_service.py
from decimal import Decimal, InvalidOperation

from sqlalchemy.orm import Session

from ivory.data.models.collection import CollectionModel
from ivory.data.models.product import ProductModel
from ivory.domain.errors import InvalidRequestError, NotFoundError
from ivory.domain.schemas import CollectionIn
from ivory.repos.cart_repo import CartRepo
from ivory.repos.catalog_repo import CollectionRepo, ProductRepo
from ivory.utils.formatting import to_money
from ivory.utils.settings import MAX_IMAGE_BYTES
from ivory.utils.logging import get_logger

logger = get_logger(__name__)


def collection_view(collection: CollectionModel | None) -> dict | None:
    if collection is None:
        return None
    return {"id": collection.id, "name": collection.name, "description": collection.description}


def product_view(product: ProductModel) -> dict:
    return {
        "id": product.id,
        "name": product.name,
        "description": product.description,
        "price": float(to_money(product.price)),
        "image_url": product.image_url,
        "quantity": product.quantity,
        "sales_count": product.sales_count,
        "collection_id": product.collection_id,
        "collection": collection_view(product.collection),
    }


def parse_price(raw) -> Decimal:
    try:
        price = to_money(raw)
    except (InvalidOperation, ValueError, TypeError):
        raise InvalidRequestError("Invalid price")
    if price <= 0:
        raise InvalidRequestError("Price must be greater than 0")
    return price


class CatalogService:
    """
    Collections and products: public reads and admin CRUD.
    Image bytes are handed to the media host; only the returned URL is stored.
    """

    def __init__(self, db: Session, media_client=None):
        self.collections = CollectionRepo(db)
        self.products = ProductRepo(db)
        self.carts = CartRepo(db)
        self.media_client = media_client

    # ------------------------------------------------------------ products

    def list_products(self) -> list[dict]:
        return [product_view(p) for p in self.products.list_products()]

    def search_products(self, query: str) -> list[dict]:
        return [product_view(p) for p in self.products.search(query or "")]

    def get_product(self, product_id: int) -> dict:
        product = self.products.get_product(product_id)
        if not product:
            raise NotFoundError("Product not found")
        return product_view(product)

    def _upload(self, image: bytes | None, filename: str | None) -> str | None:
        if not image:
            return None
        if len(image) > MAX_IMAGE_BYTES:
            raise InvalidRequestError("Image too large (max 5MB)")
        return self.media_client.upload_image(image, filename or "upload")

    def _validated_fields(self, name, price, quantity, collection_id) -> dict:
        if not name or not price or not collection_id:
            raise InvalidRequestError("Missing required fields")
        if quantity is not None and quantity < 0:
            raise InvalidRequestError("Quantity cannot be negative")
        if not self.collections.get_collection(collection_id):
            raise NotFoundError("Collection not found")
        return {
            "name": name,
            "price": parse_price(price),
            "quantity": quantity or 0,
            "collection_id": collection_id,
        }

    def create_product(
        self,
        name: str,
        description: str | None,
        price,
        quantity: int | None,
        collection_id: int | None,
        image: bytes | None = None,
        filename: str | None = None,
    ) -> dict:
        fields = self._validated_fields(name, price, quantity, collection_id)
        image_url = self._upload(image, filename) or ""

        product = self.products.save(ProductModel(description=description, image_url=image_url, **fields))
        logger.info(f"Product {product.id} created in collection {product.collection_id}")
        return product_view(product)

    def update_product(
        self,
        product_id: int,
        name: str,
        description: str | None,
        price,
        quantity: int | None,
        collection_id: int | None,
        image: bytes | None = None,
        filename: str | None = None,
    ) -> dict:
        fields = self._validated_fields(name, price, quantity, collection_id)

        product = self.products.get_product(product_id)
        if not product:
            raise NotFoundError("Product not found")

        image_url = self._upload(image, filename)
        for key, value in fields.items():
            setattr(product, key, value)
        product.description = description
        if image_url:
            product.image_url = image_url

        product = self.products.save(product)
        logger.info(f"Product {product.id} updated")
        return product_view(product)

    def delete_product(self, product_id: int) -> None:
        product = self.products.get_product(product_id)
        if not product:
            raise NotFoundError("Product not found")
        self.products.delete(product)
        logger.info(f"Product {product_id} deleted")

    # ------------------------------------------------------------ collections

    def list_collections(self) -> list[dict]:
        return [collection_view(c) for c in self.collections.list_collections()]

    def list_collections_with_counts(self) -> list[dict]:
        # one count per collection, fine at catalog sizes
        return [
            {**collection_view(c), "product_count": self.products.count_in_collection(c.id)}
            for c in self.collections.list_collections()
        ]

    def get_landing(self, user_id: int | None = None) -> dict:
        """Storefront front page: every product, collections with their products, and the cart badge."""
        products = [product_view(p) for p in self.products.list_products()]

        by_collection: dict[int, list[dict]] = {}
        for p in products:
            by_collection.setdefault(p["collection_id"], []).append(p)

        collections = [
            {**collection_view(c), "products": by_collection.get(c.id, [])}
            for c in self.collections.list_collections()
        ]

        cart_count = 0
        if user_id is not None:
            cart = self.carts.get_cart_by_user(user_id)
            cart_count = sum(i.quantity for i in cart.items) if cart else 0

        return {"products": products, "collections": collections, "cart_count": cart_count}

    def create_collection(self, payload: CollectionIn) -> dict:
        if self.collections.get_by_name(payload.name):
            raise InvalidRequestError("Collection name already exists")
        collection = self.collections.save(
            CollectionModel(name=payload.name, description=payload.description)
        )
        logger.info(f"Collection {collection.id} created")
        return collection_view(collection)

    def update_collection(self, collection_id: int, payload: CollectionIn) -> dict:
        collection = self.collections.get_collection(collection_id)
        if not collection:
            raise NotFoundError("Collection not found")

        clash = self.collections.get_by_name(payload.name)
        if clash and clash.id != collection_id:
            raise InvalidRequestError("Collection name already exists")

        collection.name = payload.name
        collection.description = payload.description
        return collection_view(self.collections.save(collection))

    def delete_collection(self, collection_id: int) -> None:
        collection = self.collections.get_collection(collection_id)
        if not collection:
            raise NotFoundError("Collection not found")
        self.collections.delete(collection)
        logger.info(f"Collection {collection_id} deleted with its products")
