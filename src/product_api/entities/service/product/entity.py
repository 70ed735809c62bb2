"""Entity: Product."""

from decimal import Decimal

from pydantic import BaseModel, Field, field_validator


class Product(BaseModel):
    """Product entity representing a product in the catalog.

    This is the domain model that carries validation. ``id`` is absent until
    the store assigns one on create and never changes afterwards.
    """

    id: int | None = Field(default=None, description="Store-assigned identifier")
    name: str = Field(min_length=1, description="Product name")
    description: str | None = Field(default=None, description="Free-form description")
    price: Decimal = Field(
        gt=0, max_digits=12, decimal_places=2, description="Unit price, strictly positive"
    )

    @field_validator("name")
    @classmethod
    def name_must_not_be_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Name must not be blank")
        return value

    def replace_details(self, other: "Product") -> "Product":
        """Return a copy carrying other's name, description and price.

        Full replacement: a ``None`` description on ``other`` clears it here.
        The identifier of ``self`` is kept.
        """
        return self.model_copy(
            update={
                "name": other.name,
                "description": other.description,
                "price": other.price,
            }
        )
