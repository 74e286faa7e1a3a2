"""
Product routes: catalog listing and CRUD.
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Response, status

from app.api.deps import authenticated_body, get_product_service, require_permission
from app.api.responses import ERROR_RESPONSES, mark_cache
from app.core.permissions import Permission
from app.schemas.common import ApiResponse, ListQuery, PaginatedResponse, PaginationInfo
from app.schemas.product import ProductCreate, ProductRead, ProductUpdate
from app.services.product_service import ProductService

router = APIRouter(tags=["products"], responses=ERROR_RESPONSES)

ProductServiceDep = Annotated[ProductService, Depends(get_product_service)]


@router.get(
    "/products",
    response_model=PaginatedResponse[ProductRead],
    dependencies=[Depends(require_permission(Permission.LIST_PRODUCTS))],
)
def list_products(
    response: Response,
    products: ProductServiceDep,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    category: Optional[str] = None,
    search: Optional[str] = None,
    sort: Optional[str] = None,
) -> PaginatedResponse[ProductRead]:
    """
    List products with optional category filter, name/description search
    and sorting. Sort values: price_asc, price_desc, name_asc (default), name_desc.
    """
    query = ListQuery.from_params(page=page, limit=limit, search=search, sort=sort, filter_value=category)
    fetched = products.get_page(query)
    mark_cache(response, fetched.from_cache)

    return PaginatedResponse[ProductRead](
        status=status.HTTP_200_OK,
        message="Products fetched from cache" if fetched.from_cache else "Products fetched successfully",
        data=fetched.value.items,
        pagination=PaginationInfo.build(query.page, query.limit, fetched.value.total),
    )


@router.post(
    "/product",
    response_model=ApiResponse[ProductRead],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_permission(Permission.CREATE_PRODUCT))],
)
def create_product(
    products: ProductServiceDep,
    product_in: Annotated[ProductCreate, Depends(authenticated_body(ProductCreate))],
) -> ApiResponse[ProductRead]:
    product = products.create(product_in)
    return ApiResponse(status=status.HTTP_201_CREATED, message="Product created successfully", data=product)


@router.get(
    "/product/{product_id}",
    response_model=ApiResponse[ProductRead],
    dependencies=[Depends(require_permission(Permission.READ_PRODUCT))],
)
def get_product(product_id: str, response: Response, products: ProductServiceDep) -> ApiResponse[ProductRead]:
    fetched = products.get(product_id)
    mark_cache(response, fetched.from_cache)
    return ApiResponse(
        status=status.HTTP_200_OK,
        message="Product details fetched from cache" if fetched.from_cache else "Product details fetched successfully",
        data=fetched.value,
    )


@router.put(
    "/product/{product_id}",
    response_model=ApiResponse[ProductRead],
    dependencies=[Depends(require_permission(Permission.UPDATE_PRODUCT))],
)
def update_product(
    product_id: str,
    products: ProductServiceDep,
    product_in: Annotated[ProductUpdate, Depends(authenticated_body(ProductUpdate))],
) -> ApiResponse[ProductRead]:
    """Partially update a product; omitted fields keep their values."""
    product = products.update(product_id, product_in.changes())
    return ApiResponse(status=status.HTTP_200_OK, message="Product updated successfully", data=product)


@router.delete(
    "/product/{product_id}",
    response_model=ApiResponse[None],
    response_model_exclude_none=True,
    dependencies=[Depends(require_permission(Permission.DELETE_PRODUCT))],
)
def delete_product(product_id: str, products: ProductServiceDep) -> ApiResponse[None]:
    products.delete(product_id)
    return ApiResponse(status=status.HTTP_200_OK, message="Product successfully deleted")
