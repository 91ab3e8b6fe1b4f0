# ivory/data/seed.py
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from ivory.data.database import SessionLocal, init_db
from ivory.data.models import CollectionModel, ProductModel
from ivory.utils.logging import get_logger

logger = get_logger(__name__)

DEMO_CATALOG = {
    ("Glow Essentials", "Everyday brightening care"): [
        ("Vitamin C Serum", "Brightening serum with 15% vitamin C", Decimal("5000.00"), 25),
        ("Shea Body Butter", "Rich moisturiser for dry skin", Decimal("3500.00"), 40),
    ],
    ("Clear Skin", "Gentle care for blemish-prone skin"): [
        ("Tea Tree Cleanser", "Foaming cleanser with tea tree oil", Decimal("2800.00"), 30),
    ],
}


def seed(db: Session) -> bool:
    # not forcing: only seed if the catalog is empty
    if db.execute(select(CollectionModel.id).limit(1)).first():
        return False

    for (name, description), products in DEMO_CATALOG.items():
        collection = CollectionModel(name=name, description=description)
        db.add(collection)
        db.flush()
        for p_name, p_description, price, quantity in products:
            db.add(
                ProductModel(
                    name=p_name,
                    description=p_description,
                    price=price,
                    quantity=quantity,
                    image_url="",
                    collection_id=collection.id,
                )
            )
    db.commit()
    logger.info(f"Seeded {len(DEMO_CATALOG)} collections")
    return True


if __name__ == "__main__":
    init_db()
    session = SessionLocal()
    try:
        seed(session)
    finally:
        session.close()
