# ivory/domain/principal.py
from dataclasses import dataclass

GUEST = "guest"
USER = "user"
ADMIN = "admin"


@dataclass(frozen=True)
class Principal:
    """Result of parsing the bearer credential once per request."""

    kind: str
    subject: int | None = None

    @property
    def is_user(self) -> bool:
        return self.kind == USER

    @property
    def is_admin(self) -> bool:
        return self.kind == ADMIN


ANONYMOUS = Principal(kind=GUEST)
