# ivory/api/routers/admin.py
from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy.orm import Session

from ivory.api.deps import get_order_service, require_admin
from ivory.data.database import get_db
from ivory.domain.schemas import (
    AdminAuthOut,
    AdminOrderEnvelope,
    AdminOrdersOut,
    AdminSignupIn,
    CustomersOut,
    DashboardOut,
    LoginIn,
    OrderStatusIn,
)
from ivory.services.dashboard_service import DashboardService, format_order
from ivory.services.order_service import OrderService
from ivory.services.user_service import AdminService, UserService

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/signup", response_model=AdminAuthOut, status_code=201)
def signup(payload: AdminSignupIn, db: Session = Depends(get_db)):
    return AdminService(db).signup(payload)


@router.post("/login", response_model=AdminAuthOut)
def login(payload: LoginIn, db: Session = Depends(get_db)):
    return AdminService(db).login(payload)


@router.get("/customers", response_model=CustomersOut)
def list_customers(_: int = Depends(require_admin), db: Session = Depends(get_db)):
    return {"data": UserService(db).list_customers()}


@router.get("/dashboard", response_model=DashboardOut)
def dashboard(_: int = Depends(require_admin), db: Session = Depends(get_db)):
    return {"data": DashboardService(db).get_dashboard()}


@router.get("/orders", response_model=AdminOrdersOut)
def list_orders(_: int = Depends(require_admin), db: Session = Depends(get_db)):
    return {"data": DashboardService(db).list_orders()}


@router.get("/orders/export")
def export_orders(_: int = Depends(require_admin), db: Session = Depends(get_db)):
    return Response(
        content=DashboardService(db).export_csv(),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="orders_export.csv"'},
    )


@router.patch("/orders/{order_id}/status", response_model=AdminOrderEnvelope)
def update_order_status(
    order_id: int,
    payload: OrderStatusIn,
    _: int = Depends(require_admin),
    svc: OrderService = Depends(get_order_service),
):
    order = svc.update_status(order_id, payload.status)
    return {"data": format_order(order)}
