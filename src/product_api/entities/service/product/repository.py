"""Product repository: CRUD-by-identifier access to stored products."""

from collections.abc import Iterator

from sqlalchemy import delete, func
from sqlmodel import Session, select

from .entity import Product
from .table import ProductTable


class ProductRepository:
    """Data-access layer for products.

    Every write commits its own transaction; the store's per-statement
    atomicity is the only guarantee given to concurrent callers.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def save(self, product: Product) -> Product:
        """Insert when ``product.id`` is None, otherwise update that row."""
        row = None
        if product.id is not None:
            row = self._session.get(ProductTable, product.id)

        if row is None:
            row = ProductTable(**product.model_dump())
        else:
            row.name = product.name
            row.description = product.description
            row.price = product.price

        self._session.add(row)
        self._session.commit()
        self._session.refresh(row)
        return Product.model_validate(row, from_attributes=True)

    def find_by_id(self, product_id: int) -> Product | None:
        row = self._session.get(ProductTable, product_id)
        if row is None:
            return None
        return Product.model_validate(row, from_attributes=True)

    def find_all(self) -> Iterator[Product]:
        """Yield every stored product, ordered by id."""
        statement = select(ProductTable).order_by(ProductTable.id)
        for row in self._session.exec(statement):
            yield Product.model_validate(row, from_attributes=True)

    def exists_by_id(self, product_id: int) -> bool:
        return self._session.get(ProductTable, product_id) is not None

    def delete_by_id(self, product_id: int) -> None:
        row = self._session.get(ProductTable, product_id)
        if row is not None:
            self._session.delete(row)
            self._session.commit()

    def delete_all(self) -> None:
        self._session.execute(delete(ProductTable))
        self._session.commit()

    def count(self) -> int:
        statement = select(func.count()).select_from(ProductTable)
        return self._session.exec(statement).one()
