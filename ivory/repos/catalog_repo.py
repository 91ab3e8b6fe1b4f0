# ivory/repos/catalog_repo.py
from sqlalchemy import select, func, or_, update
from sqlalchemy.orm import Session, selectinload

from ivory.data.models.collection import CollectionModel
from ivory.data.models.product import ProductModel


class CollectionRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_collection(self, collection_id: int) -> CollectionModel | None:
        return self.db.get(CollectionModel, collection_id)

    def get_by_name(self, name: str) -> CollectionModel | None:
        return self.db.execute(
            select(CollectionModel).where(CollectionModel.name == name)
        ).scalar_one_or_none()

    def list_collections(self) -> list[CollectionModel]:
        return list(self.db.execute(select(CollectionModel).order_by(CollectionModel.id)).scalars())

    def count(self) -> int:
        return self.db.scalar(select(func.count(CollectionModel.id))) or 0

    def save(self, collection: CollectionModel) -> CollectionModel:
        self.db.add(collection)
        self.db.commit()
        self.db.refresh(collection)
        return collection

    def delete(self, collection: CollectionModel) -> None:
        # relationship cascade deletes the products (and their cart lines)
        self.db.delete(collection)
        self.db.commit()


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_product(self, product_id: int) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def list_products(self, limit: int | None = None) -> list[ProductModel]:
        stmt = select(ProductModel).options(selectinload(ProductModel.collection)).order_by(ProductModel.id)
        if limit is not None:
            stmt = stmt.limit(limit)
        return list(self.db.execute(stmt).scalars())

    def search(self, query: str) -> list[ProductModel]:
        pattern = f"%{query.lower()}%"
        stmt = (
            select(ProductModel)
            .options(selectinload(ProductModel.collection))
            .where(
                or_(
                    func.lower(ProductModel.name).like(pattern),
                    func.lower(func.coalesce(ProductModel.description, "")).like(pattern),
                )
            )
            .order_by(ProductModel.id)
        )
        return list(self.db.execute(stmt).scalars())

    def count(self) -> int:
        return self.db.scalar(select(func.count(ProductModel.id))) or 0

    def count_in_collection(self, collection_id: int) -> int:
        return self.db.scalar(
            select(func.count(ProductModel.id)).where(ProductModel.collection_id == collection_id)
        ) or 0

    def save(self, product: ProductModel) -> ProductModel:
        self.db.add(product)
        self.db.commit()
        self.db.refresh(product)
        return product

    def delete(self, product: ProductModel) -> None:
        self.db.delete(product)
        self.db.commit()

    def apply_sale(self, product_id: int, quantity: int) -> int:
        """
        Unconditional stock decrement + sales increment, no commit.
        Stock may go negative: the only floor is the checkout-time check.
        """
        result = self.db.execute(
            update(ProductModel)
            .where(ProductModel.id == product_id)
            .values(
                quantity=ProductModel.quantity - quantity,
                sales_count=ProductModel.sales_count + quantity,
            )
        )
        return result.rowcount
