"""Plain-text rendering of tool results.

Hosts that hand a single string back to the model (the MCP server)
format tool results here, so every hosting mode shows the same facts.
"""

from __future__ import annotations

import json
import re
from typing import Any, Callable

SEPARATOR = "-" * 37

_TAG_RE = re.compile(r"<[^>]*>")
_SPACE_RE = re.compile(r"\s+")


def strip_html(text: str) -> str:
    """Remove HTML tags and collapse whitespace."""
    if not text:
        return ""
    return _SPACE_RE.sub(" ", _TAG_RE.sub(" ", text)).strip()


def is_error(result: Any) -> bool:
    return isinstance(result, dict) and "error" in result


def format_error(result: dict) -> str:
    lines = [f"Error: {result['error']}"]
    if result.get("message"):
        lines.append(result["message"])
    choices = result.get("availableStatuses")
    if choices:
        lines.append("Available statuses: " + ", ".join(f"{c['name']} ({c['code']})" for c in choices))
    return "\n".join(lines)


def _render(result: Any, required_key: str, formatter: Callable[[dict], str]) -> str:
    if is_error(result):
        return format_error(result)
    if not isinstance(result, dict) or required_key not in result:
        # Upstream payload passed through unshaped
        return json.dumps(result, indent=2, ensure_ascii=False, default=str)
    return formatter(result)


def _order_list(result: dict) -> str:
    pagination = result.get("pagination") or {}
    lines = [
        f"Order List (Page {pagination.get('page', 1)} of {pagination.get('totalPages', 0)})",
        f"Total Orders: {pagination.get('totalCount', 0)}",
        "",
    ]
    orders = result.get("orders") or []
    if not orders:
        lines.append("No orders found matching the criteria.")
    for order in orders:
        lines.extend([
            SEPARATOR,
            f"Order #{order.get('orderNumber') or ''} (ID: {order.get('orderId')}), "
            f"(OrderDetailID: {order.get('orderDetailId')})",
            f"Status: {order.get('statusText') or order.get('status')}",
            f"Date: {order.get('orderDate') or 'N/A'}",
            f"Items: {order.get('itemCount', 0)}",
            "",
        ])
    return "\n".join(lines)


def _order_fields(result: dict) -> list[str]:
    lines = [
        f"Order Number: {result.get('orderNumber')}",
        f"Order Detail ID: {result.get('orderDetailId')}",
        f"Status: {result.get('status')}"
        + (f" (code {result['statusCode']})" if result.get("statusCode") is not None else ""),
    ]
    optional = (
        ("Date", "orderDate"),
        ("Customer", "customer"),
        ("Total", "total"),
        ("Items", "itemCount"),
    )
    for label, key in optional:
        if result.get(key) not in (None, ""):
            lines.append(f"{label}: {result[key]}")
    return lines


def _order_details(result: dict) -> str:
    return "\n".join(["Order Details", SEPARATOR, *_order_fields(result)])


def _order_status(result: dict) -> str:
    return "\n".join(["Order Status Information", SEPARATOR, *_order_fields(result)])


def _detail_status(result: dict) -> str:
    code = result.get("statusCode")
    return "\n".join([
        "Order Status Information",
        SEPARATOR,
        f"Order Detail ID: {result.get('orderDetailId')}",
        f"Status: {result.get('status')}" + (f" (code {code})" if code is not None else ""),
    ])


def _status_update(result: dict) -> str:
    return "\n".join([
        "Order Status Updated Successfully",
        SEPARATOR,
        f"Order Detail ID: {result.get('orderDetailId')}",
        f"New Status: {result.get('newStatus')} (code {result.get('statusCode')})",
    ])


def _product_search(result: dict) -> str:
    pagination = result.get("pagination") or {}
    criteria = result.get("searchCriteria") or {}
    lines = [
        "Product Search Results",
        f"Search: \"{criteria.get('searchString', '')}\" | Page {pagination.get('pageIndex', 1)} "
        f"of {pagination.get('totalPages', 0)} | Page Size: {pagination.get('pageSize')}",
        f"Total Products Found: {pagination.get('totalCount', 0)}",
        SEPARATOR,
        "",
    ]
    products = result.get("products") or []
    if not products:
        lines.append("No products found matching the search criteria.")
    for product in products:
        lines.append(f"Product: {product['productName']}")
        lines.append(f"   Code: {product['productCode']}")
        lines.append(f"   Brand: {product['brandName']}")
        description = strip_html(product.get("productDescription", ""))
        if description:
            lines.append(f"   Description: {description}")
        if product.get("imageUrl"):
            lines.append(f"   Image: {product['imageUrl']}")
        lines.append(f"   Total SKUs: {product['totalSkuCount']}")
        skus = product.get("skus") or []
        if skus:
            lines.append(f"   SKUs ({len(skus)} shown):")
        for sku in skus:
            lines.append(f"      * SKU: {sku['skuCode']}")
            if sku.get("barcode"):
                lines.append(f"        Barcode: {sku['barcode']}")
            if sku.get("manufacturerCode"):
                lines.append(f"        Mfg Code: {sku['manufacturerCode']}")
            if sku.get("imageUrl"):
                lines.append(f"        Image: {sku['imageUrl']}")
        lines.append("")
    return "\n".join(lines)


def format_order_list(result: Any) -> str:
    return _render(result, "orders", _order_list)


def format_order_details(result: Any) -> str:
    return _render(result, "orderNumber", _order_details)


def format_order_status(result: Any) -> str:
    return _render(result, "orderNumber", _order_status)


def format_detail_status(result: Any) -> str:
    return _render(result, "orderDetailId", _detail_status)


def format_status_update(result: Any) -> str:
    return _render(result, "success", _status_update)


def format_product_search(result: Any) -> str:
    return _render(result, "products", _product_search)
