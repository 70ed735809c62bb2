"""Entities organised by business concept.

Each entity package keeps its domain model (entity.py), its persistence
model (table.py) and its data-access layer (repository.py) together.
"""

from .service.product import Product, ProductRepository, ProductTable

__all__ = [
    "Product",
    "ProductTable",
    "ProductRepository",
]
