"""Shop model: the slice of the business directory the event engine reads.

Shops are owned by the directory service. The event engine only needs the
name and address for feeds and calendar export, and ``claimed_by`` to decide
who owns a shop.
"""

from sqlmodel import Field, SQLModel


class Shop(SQLModel, table=True):
    """A business listed in the directory.

    Attributes:
        id: Directory identifier.
        name: Display name, searched by the event feed.
        address: Street address.
        city: City name.
        claimed_by: User id of the verified owner, or None if unclaimed.
    """
    id: str = Field(primary_key=True)
    name: str
    address: str = ""
    city: str = ""
    claimed_by: str | None = Field(default=None, index=True)
