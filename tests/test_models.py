"""Tests for SQLAlchemy models."""

import uuid

from catalog.models import Photo, Product


class TestProductModel:
    """Tests for the Product model."""

    def test_product_attributes(self) -> None:
        """Test that Product has all required attributes."""
        product = Product(
            name="shirt",
            price=20.0,
            stock=5,
            category="apparel",
            photo_public_id="products/abc",
            photo_url="https://res.cloudinary.com/demo/image/upload/products/abc.png",
        )
        assert product.name == "shirt"
        assert product.price == 20.0
        assert product.stock == 5
        assert product.category == "apparel"

    def test_product_default_id(self) -> None:
        """Test that Product generates a UUID by default."""
        product = Product(name="hat", price=5.0, stock=1, category="apparel")
        # id will be None until persisted, but default is set
        assert product.id is None or isinstance(product.id, uuid.UUID)

    def test_photo_property(self) -> None:
        product = Product(photo_public_id="products/abc", photo_url="https://example.com/abc.png")
        assert product.photo == Photo(public_id="products/abc", url="https://example.com/abc.png")

    def test_photo_setter(self) -> None:
        product = Product(name="hat")
        product.photo = Photo(public_id="products/new", url="https://example.com/new.png")

        assert product.photo_public_id == "products/new"
        assert product.photo_url == "https://example.com/new.png"

    def test_photo_in_constructor(self) -> None:
        photo = Photo(public_id="products/ctor", url="https://example.com/ctor.png")
        product = Product(name="hat", photo=photo)
        assert product.photo == photo

    def test_product_repr(self) -> None:
        """Test Product string representation."""
        product = Product(name="shirt", category="apparel")
        repr_str = repr(product)
        assert "shirt" in repr_str
        assert "apparel" in repr_str

    def test_product_tablename(self) -> None:
        """Test that Product has correct table name."""
        assert Product.__tablename__ == "products"

    def test_required_columns(self) -> None:
        columns = {c.name: c for c in Product.__table__.columns}
        required = {
            "id",
            "name",
            "price",
            "stock",
            "category",
            "photo_public_id",
            "photo_url",
            "created_at",
            "updated_at",
        }
        assert required == set(columns)
        for name in required - {"id"}:
            assert columns[name].nullable is False, name

    def test_name_is_unique(self) -> None:
        assert Product.__table__.c.name.unique is True
        unique_indexes = {
            index.name for index in Product.__table__.indexes if index.unique
        }
        assert "ix_products_name" in unique_indexes

    def test_non_negative_constraints(self) -> None:
        constraint_names = {c.name for c in Product.__table__.constraints}
        assert "ck_products_price_non_negative" in constraint_names
        assert "ck_products_stock_non_negative" in constraint_names
