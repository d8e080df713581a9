"""Product catalogue search.

Example scenario:
    User:  "Do we have any USB-C hubs?"
    Agent: → search_products(search_string="USB-C hub")
           → "Found 3 products. The first is ..."

Note: ``totalSkuCount`` is the upstream's count of SKUs for a product,
while ``skus`` holds only the SKU records it chose to return. The two
may differ; both are reported as-is (``skusReturned`` is the length of
``skus``).
"""

from __future__ import annotations

import logging
from typing import Annotated, Any, Optional

from pydantic import Field

from src.order_api.client import call_api
from src.order_api.config import TargetService
from src.order_api.errors import ContractMismatchError

from .base_tool import (
    as_int,
    as_str,
    clamp_page_size,
    error_result,
    page_or_default,
    require_response,
    total_pages,
)

logger = logging.getLogger(__name__)

DEFAULT_PRODUCT_PAGE_SIZE = 10


def summarize_sku(sku: dict) -> dict[str, str]:
    return {
        "skuCode": as_str(sku.get("skuCode")),
        "barcode": as_str(sku.get("barcode")),
        "manufacturerCode": as_str(sku.get("manufacturerCode")),
        "imageUrl": as_str(sku.get("imageUrl")),
    }


def summarize_product(product: dict) -> dict[str, Any]:
    """Project a product search hit onto the fixed ProductSummary fields."""
    raw_skus = product.get("skus")
    skus = [summarize_sku(s) for s in raw_skus if isinstance(s, dict)] if isinstance(raw_skus, list) else []
    return {
        "productName": as_str(product.get("name")),
        "productDescription": as_str(product.get("description")),
        "productCode": as_str(product.get("code")),
        "brandName": as_str(product.get("brandName")),
        "imageUrl": as_str(product.get("imageTag")),
        "totalSkuCount": as_int(product.get("totalSkuCount")),
        "skusReturned": len(skus),
        "skus": skus,
    }


async def search_products(
    search_string: Annotated[
        Optional[str],
        Field(description="Search string to filter products by name or code (leave empty to get all products)"),
    ] = "",
    page_index: Annotated[int, Field(description="Page number for pagination (default: 1)", ge=1)] = 1,
    page_size: Annotated[
        int, Field(description="Number of products per page (default: 10, max: 100)", ge=1)
    ] = DEFAULT_PRODUCT_PAGE_SIZE,
) -> dict:
    """Search for products with pagination. Returns name, description, code, brand, image and SKU details."""
    search = search_string or ""
    page = page_or_default(page_index)
    effective_size = clamp_page_size(page_size, DEFAULT_PRODUCT_PAGE_SIZE)
    request_body = {
        "SearchString": search,
        "PageIndex": page,
        "PageSize": effective_size,
    }
    logger.info("Product search: %s", request_body)

    result = await call_api(
        "/products/search",
        method="POST",
        body=request_body,
        service=TargetService.PRODUCT_QUERIES,
    )
    if not result.success:
        return error_result(
            result.error,
            "Failed to search products. Please check the search criteria and try again.",
        )

    try:
        response = require_response(result.data)
    except ContractMismatchError as exc:
        logger.warning("Product search returned no response property: %r", exc.payload)
        return error_result(
            str(exc),
            "Could not parse product search results. The API did not return data in the expected format.",
        )

    if not isinstance(response, dict):
        response = {}
    total_count = as_int(response.get("totalRecords"))
    raw_products = response.get("data")
    products = [
        summarize_product(p) for p in raw_products if isinstance(p, dict)
    ] if isinstance(raw_products, list) else []
    pages = total_pages(total_count, effective_size)

    return {
        "products": products,
        "pagination": {
            "totalCount": total_count,
            "pageIndex": page,
            "pageSize": effective_size,
            "totalPages": pages,
            "productsOnPage": len(products),
        },
        "searchCriteria": {
            "searchString": search or "(all products)",
        },
        "message": f"Found {total_count} products (showing page {page} of {pages})",
    }
