"""The acting user, as supplied by the upstream authentication layer.

Authentication itself happens elsewhere; requests arrive with the user id and
admin flag in headers. Shop ownership is looked up from the shop directory.
"""
from dataclasses import dataclass, field

from fastapi import Depends, Header
from sqlmodel import Session, select

from app.core.database import get_session
from app.models import Shop


@dataclass(frozen=True)
class Actor:
    """Who is performing an operation.

    Attributes:
        user_id: Id of the signed-in user, or None for anonymous visitors.
        is_admin: Global admin flag.
        owned_shop_ids: Shops whose claim belongs to this user.
    """
    user_id: str | None = None
    is_admin: bool = False
    owned_shop_ids: frozenset[str] = field(default_factory=frozenset)

    def is_privileged_for(self, shop_id: str | None) -> bool:
        """Admins are privileged everywhere, owners on their own shops."""
        return self.is_admin or (shop_id is not None and shop_id in self.owned_shop_ids)


ANONYMOUS = Actor()


def owned_shop_ids(session: Session, user_id: str) -> frozenset[str]:
    statement = select(Shop.id).where(Shop.claimed_by == user_id)
    return frozenset(session.exec(statement).all())


def get_actor(
    x_user_id: str | None = Header(default=None),
    x_user_admin: bool = Header(default=False),
    session: Session = Depends(get_session),
) -> Actor:
    """Dependency resolving the request's actor from auth headers."""
    if not x_user_id:
        return ANONYMOUS
    return Actor(
        user_id=x_user_id,
        is_admin=x_user_admin,
        owned_shop_ids=owned_shop_ids(session, x_user_id),
    )
