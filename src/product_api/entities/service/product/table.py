"""Product database table model."""

from decimal import Decimal

from sqlmodel import Field, SQLModel


class ProductTable(SQLModel, table=True):
    """Database persistence model for products.

    This represents how the Product entity is stored in the database.
    It's separate from the domain entity to maintain clean architecture
    while keeping related code together.
    """

    __tablename__ = "products"

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(nullable=False)
    description: str | None = None
    price: Decimal = Field(max_digits=12, decimal_places=2, nullable=False)
