"""Product business service.

Every operation reads the execution mode at call entry and routes its store
call through the matching strategy: the delayed strategy when the mode is
enabled, the immediate strategy otherwise. Results are identical on both
paths; only timing and the executing thread differ.

Not-found is a normal outcome (``None``/``False``). Store failures raised by
the repository propagate unchanged.
"""

from collections.abc import AsyncIterator

from loguru import logger

from src.product_api.core.services.execution import (
    DelayedExecution,
    ExecutionModeManager,
    ExecutionStrategy,
    ImmediateExecution,
)
from src.product_api.entities.service.product import Product, ProductRepository


class ProductService:
    """Service layer for product CRUD operations."""

    def __init__(
        self,
        repository: ProductRepository,
        mode: ExecutionModeManager,
        delayed: ExecutionStrategy | None = None,
        immediate: ExecutionStrategy | None = None,
    ) -> None:
        self._repository = repository
        self._mode = mode
        self._delayed = delayed or DelayedExecution()
        self._immediate = immediate or ImmediateExecution()

    def _strategy(self, operation: str) -> ExecutionStrategy:
        enabled = self._mode.is_enabled
        logger.info("{} - async mode enabled: {}", operation, enabled)
        return self._delayed if enabled else self._immediate

    async def find_all(self) -> AsyncIterator[Product]:
        strategy = self._strategy("find_all")
        async for product in strategy.stream(self._repository.find_all):
            yield product

    async def find_by_id(self, product_id: int) -> Product | None:
        strategy = self._strategy(f"find_by_id({product_id})")
        return await strategy.call(self._repository.find_by_id, product_id)

    async def create(self, product: Product) -> Product:
        strategy = self._strategy("create")
        # Ids are store-assigned; create never targets an existing row
        new_product = product.model_copy(update={"id": None})
        return await strategy.call(self._repository.save, new_product)

    async def update(self, product_id: int, product: Product) -> Product | None:
        strategy = self._strategy(f"update({product_id})")
        existing = self._repository.find_by_id(product_id)
        if existing is None:
            return None
        updated = existing.replace_details(product)
        return await strategy.call(self._repository.save, updated)

    async def delete(self, product_id: int) -> bool:
        strategy = self._strategy(f"delete({product_id})")
        if not self._repository.exists_by_id(product_id):
            return False
        await strategy.call(self._repository.delete_by_id, product_id)
        return True
