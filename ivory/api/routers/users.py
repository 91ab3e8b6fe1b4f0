# ivory/api/routers/users.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ivory.api.deps import get_optional_principal, require_user
from ivory.data.database import get_db
from ivory.domain.principal import Principal
from ivory.domain.schemas import AuthOut, LandingOut, LoginIn, MeOut, SignupIn
from ivory.services.catalog_service import CatalogService
from ivory.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.post("/signup", response_model=AuthOut, status_code=201)
def signup(payload: SignupIn, db: Session = Depends(get_db)):
    result = UserService(db).signup(payload)
    return {"message": "Registration successful", **result}


@router.post("/login", response_model=AuthOut)
def login(payload: LoginIn, db: Session = Depends(get_db)):
    result = UserService(db).login(payload)
    return {"message": "Login successful", **result}


@router.get("/me", response_model=MeOut)
def me(user_id: int = Depends(require_user), db: Session = Depends(get_db)):
    return {"data": {"user": UserService(db).get_user(user_id)}}


@router.get("/landing", response_model=LandingOut)
def landing(principal: Principal = Depends(get_optional_principal), db: Session = Depends(get_db)):
    user_id = principal.subject if principal.is_user else None
    return {"data": CatalogService(db).get_landing(user_id)}
