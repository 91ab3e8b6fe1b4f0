from sqlalchemy.orm import Session

from ivory.data.models.admin import AdminModel
from ivory.data.models.user import UserModel
from ivory.domain.errors import AccessDeniedError, AuthenticationError, InvalidRequestError, NotFoundError
from ivory.domain.schemas import AdminSignupIn, LoginIn, SignupIn
from ivory.repos.admin_repo import AdminRepo
from ivory.repos.user_repo import UserRepo
from ivory.utils.security import create_token, hash_password, verify_password
from ivory.utils.settings import ADMIN_CODE
from ivory.utils.logging import get_logger

logger = get_logger(__name__)


def user_view(user: UserModel) -> dict:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "address": user.address,
        "phone": user.phone,
    }


def admin_view(admin: AdminModel) -> dict:
    return {"id": admin.id, "name": admin.name, "email": admin.email}


class UserService:
    def __init__(self, db: Session):
        self.repo = UserRepo(db)

    def signup(self, payload: SignupIn) -> dict:
        if payload.password != payload.confirm_password:
            raise InvalidRequestError("Passwords do not match")

        if self.repo.get_by_email(payload.email):
            raise InvalidRequestError("Email already registered")

        user = self.repo.create_user(
            UserModel(
                name=payload.name,
                email=payload.email,
                address=payload.address,
                phone=payload.phone,
                password_hash=hash_password(payload.password),
            )
        )
        logger.info(f"User {user.id} registered")
        return {"token": create_token({"userId": user.id}), "user": user_view(user)}

    def login(self, payload: LoginIn) -> dict:
        user = self.repo.get_by_email(payload.email)
        if not user:
            raise NotFoundError("User not found")
        if not verify_password(payload.password, user.password_hash):
            raise AuthenticationError("Invalid password")
        return {"token": create_token({"userId": user.id}), "user": user_view(user)}

    def get_user(self, user_id: int) -> dict:
        user = self.repo.get_user(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user_view(user)

    def list_customers(self) -> list[dict]:
        return [{**user_view(u), "created_at": u.created_at} for u in self.repo.list_users()]


class AdminService:
    def __init__(self, db: Session):
        self.repo = AdminRepo(db)

    def signup(self, payload: AdminSignupIn) -> dict:
        # the code only gates signup, it is not stored
        if payload.admin_code != ADMIN_CODE:
            raise AccessDeniedError("Invalid Admin Code")

        if self.repo.get_by_email(payload.email):
            raise InvalidRequestError("Email already registered")

        admin = self.repo.create_admin(
            AdminModel(
                name=payload.name,
                email=payload.email,
                password_hash=hash_password(payload.password),
            )
        )
        logger.info(f"Admin {admin.id} registered")
        return {"token": create_token({"adminId": admin.id}), "admin": admin_view(admin)}

    def login(self, payload: LoginIn) -> dict:
        admin = self.repo.get_by_email(payload.email)
        if not admin or not verify_password(payload.password, admin.password_hash):
            raise AuthenticationError("Invalid email or password")
        return {"token": create_token({"adminId": admin.id}), "admin": admin_view(admin)}
