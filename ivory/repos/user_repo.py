from sqlalchemy import select, func
from sqlalchemy.orm import Session
from ivory.data.models.user import UserModel


class UserRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: int) -> UserModel | None:
        return self.db.get(UserModel, user_id)

    def get_by_email(self, email: str) -> UserModel | None:
        return self.db.execute(
            select(UserModel).where(func.lower(UserModel.email) == email.lower())
        ).scalar_one_or_none()

    def list_users(self) -> list[UserModel]:
        return list(
            self.db.execute(select(UserModel).order_by(UserModel.created_at.desc(), UserModel.id.desc())).scalars()
        )

    def count(self) -> int:
        return self.db.scalar(select(func.count(UserModel.id))) or 0

    def create_user(self, user: UserModel) -> UserModel:
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user
