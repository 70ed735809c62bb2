"""Product API router with CRUD operations."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Response, status

from src.product_api.api.http.deps import get_product_service
from src.product_api.core.services import ProductService
from src.product_api.entities.service.product import Product

router = APIRouter(prefix="/products", tags=["products"])

_NOT_FOUND = {404: {"description": "Product not found"}}

# Store ids are signed 64-bit integers
ProductId = Annotated[int, Path(ge=1, le=2**63 - 1)]


@router.get("", response_model=list[Product])
async def list_products(
    service: ProductService = Depends(get_product_service),
) -> list[Product]:
    """List all products."""
    return [product async for product in service.find_all()]


@router.get("/{product_id}", response_model=Product, responses=_NOT_FOUND)
async def get_product(
    product_id: ProductId,
    service: ProductService = Depends(get_product_service),
) -> Product | Response:
    """Get a product by ID."""
    product = await service.find_by_id(product_id)
    if product is None:
        return Response(status_code=status.HTTP_404_NOT_FOUND)
    return product


@router.post("", response_model=Product, status_code=status.HTTP_201_CREATED)
async def create_product(
    product: Product,
    service: ProductService = Depends(get_product_service),
) -> Product:
    """Create a new product."""
    return await service.create(product)


@router.put("/{product_id}", response_model=Product, responses=_NOT_FOUND)
async def update_product(
    product_id: ProductId,
    product: Product,
    service: ProductService = Depends(get_product_service),
) -> Product | Response:
    """Replace the name, description and price of a product."""
    updated = await service.update(product_id, product)
    if updated is None:
        return Response(status_code=status.HTTP_404_NOT_FOUND)
    return updated


@router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses=_NOT_FOUND,
)
async def delete_product(
    product_id: ProductId,
    service: ProductService = Depends(get_product_service),
) -> Response:
    """Delete a product."""
    deleted = await service.delete(product_id)
    if not deleted:
        return Response(status_code=status.HTTP_404_NOT_FOUND)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
