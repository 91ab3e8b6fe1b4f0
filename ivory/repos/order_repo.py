# ivory/repos/order_repo.py
from datetime import datetime

from sqlalchemy import and_, or_, select, update, func
from sqlalchemy.orm import Session, selectinload

from ivory.data.models.order import OrderModel
from ivory.data.models.order_item import OrderItemModel
from ivory.domain.order_status import (
    FAILED,
    PENDING_PAYMENT,
    PAYMENT_INIT_FAILED,
    PAYMENT_VERIFY_ERROR,
)


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def _with_items(self):
        return select(OrderModel).options(
            selectinload(OrderModel.items).selectinload(OrderItemModel.product),
            selectinload(OrderModel.user),
        )

    def get_order(self, order_id: int) -> OrderModel | None:
        return self.db.execute(self._with_items().where(OrderModel.id == order_id)).scalar_one_or_none()

    def get_by_reference(self, reference: str) -> OrderModel | None:
        return self.db.execute(
            self._with_items().where(OrderModel.payment_reference == reference)
        ).scalar_one_or_none()

    def list_orders(self, limit: int | None = None) -> list[OrderModel]:
        stmt = self._with_items().order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
        if limit is not None:
            stmt = stmt.limit(limit)
        return list(self.db.execute(stmt).scalars())

    def list_stale_pending(self, created_before: datetime) -> list[OrderModel]:
        return list(
            self.db.execute(
                self._with_items().where(
                    OrderModel.status == PENDING_PAYMENT,
                    OrderModel.payment_reference.is_not(None),
                    or_(
                        OrderModel.payment_status.is_(None),
                        OrderModel.payment_status != PAYMENT_INIT_FAILED,
                    ),
                    OrderModel.created_at < created_before,
                )
            ).scalars()
        )

    def count(self) -> int:
        return self.db.scalar(select(func.count(OrderModel.id))) or 0

    def total_sales(self):
        return self.db.scalar(select(func.coalesce(func.sum(OrderModel.total), 0)))

    def transition_status(self, order_id: int, from_statuses, to_status: str, **values) -> int:
        """
        Conditional update, no commit.
        UPDATE orders SET status=:to WHERE id=:id AND status IN (:from)
        rowcount 0 means someone else already moved the order.
        """
        result = self.db.execute(
            update(OrderModel)
            .where(OrderModel.id == order_id, OrderModel.status.in_(tuple(from_statuses)))
            .values(status=to_status, **values)
        )
        return result.rowcount

    def claim_payable(self, order_id: int, to_status: str, **values) -> int:
        """
        Like transition_status, for a confirmed charge. Payable means pending-payment,
        or failed only because the verify call errored.
        """
        result = self.db.execute(
            update(OrderModel)
            .where(
                OrderModel.id == order_id,
                or_(
                    OrderModel.status == PENDING_PAYMENT,
                    and_(
                        OrderModel.status == FAILED,
                        OrderModel.payment_status == PAYMENT_VERIFY_ERROR,
                    ),
                ),
            )
            .values(status=to_status, **values)
        )
        return result.rowcount

    def set_payment_status(self, order_id: int, payment_status: str) -> None:
        self.db.execute(
            update(OrderModel).where(OrderModel.id == order_id).values(payment_status=payment_status)
        )

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
