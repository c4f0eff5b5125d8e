"""Product model for the catalog."""

import uuid
from dataclasses import dataclass
from datetime import UTC, datetime

from sqlalchemy import CheckConstraint, DateTime, Integer, Numeric, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from catalog.database import Base

# Largest values the price NUMERIC(10, 2) and stock INTEGER columns can hold
MAX_PRICE = 99_999_999.99
MAX_STOCK = 2**31 - 1


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class Photo:
    """Reference to an image hosted by the remote media store."""

    public_id: str
    url: str


class Product(Base):
    """Product model representing a catalog item.

    Attributes:
        id: Unique identifier (UUID)
        name: Lowercased product name, unique across the catalog
        price: Unit price, non-negative
        stock: Units on hand, non-negative
        category: Lowercased category name
        photo_public_id: Media store identifier of the product photo
        photo_url: Public URL of the product photo
        created_at: Timestamp when the record was created
        updated_at: Timestamp of the last write
    """

    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_products_price_non_negative"),
        CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )
    price: Mapped[float] = mapped_column(
        Numeric(10, 2, asdecimal=False),
        nullable=False,
    )
    stock: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    category: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        index=True,
    )
    photo_public_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    photo_url: Mapped[str] = mapped_column(
        String(1024),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
        nullable=False,
    )

    @property
    def photo(self) -> Photo:
        """The photo reference as a single value."""
        return Photo(public_id=self.photo_public_id, url=self.photo_url)

    @photo.setter
    def photo(self, value: Photo) -> None:
        self.photo_public_id = value.public_id
        self.photo_url = value.url

    def __repr__(self) -> str:
        return f"<Product(name={self.name!r}, category={self.category!r})>"
