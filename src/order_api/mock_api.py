"""Mock of the order query, order command and product query services.

Serves all three services from one in-memory dataset so the tools can be
exercised locally without the real backend::

    python -m src.order_api.mock_api --port 8083
    export ORDER_QUERIES_API_BASE_URL=http://localhost:8083
    export ORDER_COMMANDS_API_BASE_URL=http://localhost:8083
    export PRODUCT_QUERIES_API_BASE_URL=http://localhost:8083

Every request is recorded in ``app["requests"]`` for inspection.
"""

from __future__ import annotations

import argparse
import copy
import json
import logging
import os
import time
from pathlib import Path
from typing import Any, Optional

from aiohttp import web

from .set_logging import configure_logging
from .status_codes import code_to_name, name_to_code

logger = logging.getLogger(__name__)

SAMPLE_DATA: dict[str, Any] = {
    "orders": [
        {
            "orderId": 12,
            "orderKey": "3f2a9c1e-8d4b-4e0a-9b7c-0a1d2e3f4a5b",
            "orderNumber": "ORD12",
            "orderDetailId": 4712,
            "status": 6,
            "orderDate": "2025-01-14T09:30:00",
            "createdDate": "2025-01-14T09:30:00",
            "modifiedDate": "2025-01-15T11:00:00",
            "customerId": "C-1001",
            "customerName": "Maria Schmidt",
            "email": "maria.schmidt@example.com",
            "total": 149.90,
            "items": [{"sku": "LS-100", "quantity": 1}, {"sku": "HUB-7", "quantity": 1}],
        },
        {
            "orderId": 15,
            "orderKey": "7b6c5d4e-3f2a-4b1c-8d9e-0f1a2b3c4d5e",
            "orderNumber": "ORD15",
            "orderDetailId": 4715,
            "status": 12,
            "orderDate": "2025-02-03T14:05:00",
            "createdDate": "2025-02-03T14:05:00",
            "modifiedDate": "2025-02-05T08:20:00",
            "customerId": "C-1002",
            "customerName": "Thomas Mueller",
            "email": "thomas.mueller@example.com",
            "total": 39.00,
            "items": [{"sku": "MOUSE-2", "quantity": 1}],
        },
    ],
    "products": [
        {
            "name": "USB-C Hub 7-in-1",
            "description": "<p>Seven ports, <b>aluminium</b> housing.</p>",
            "code": "HUB-7",
            "brandName": "Anchorline",
            "imageTag": "/images/hub-7.jpg",
            "totalSkuCount": 3,
            "skus": [
                {"skuCode": "HUB-7-GRY", "barcode": "4006381333931", "manufacturerCode": "AL-H7G", "imageUrl": ""},
                {"skuCode": "HUB-7-SLV", "barcode": "4006381333948", "manufacturerCode": "AL-H7S", "imageUrl": ""},
            ],
        },
        {
            "name": "Laptop Stand",
            "description": "Adjustable laptop stand.",
            "code": "LS-100",
            "brandName": "Deskform",
            "imageTag": "/images/ls-100.jpg",
            "totalSkuCount": 1,
            "skus": [{"skuCode": "LS-100-BLK", "barcode": "4006381333955", "manufacturerCode": "DF-100", "imageUrl": ""}],
        },
    ],
}


def _norm(s: Any) -> str:
    return " ".join(str(s or "").strip().lower().split())


def _envelope(response: Any) -> dict[str, Any]:
    return {"isSuccess": True, "response": response}


def _failure(message: str, status: int) -> web.Response:
    return web.json_response({"isSuccess": False, "message": message}, status=status)


def _orders(request: web.Request) -> list[dict]:
    return [o for o in request.app["data"].get("orders") or [] if isinstance(o, dict)]


def _with_status_text(order: dict) -> dict:
    row = dict(order)
    row["statusText"] = code_to_name(row.get("status")) or ""
    return row


def _status_record(order: dict) -> dict:
    return {
        "orderDetailId": order.get("orderDetailId"),
        "orderStatusId": order.get("status"),
        "orderStatusName": code_to_name(order.get("status")) or "",
    }


def _find_order(request: web.Request, key: str, value: str) -> Optional[dict]:
    wanted = value.strip().upper()
    for order in _orders(request):
        if str(order.get(key) or "").strip().upper() == wanted:
            return order
    return None


_SORT_KEYS = {
    "ordernumber": "orderNumber",
    "createddate": "createdDate",
    "status": "status",
    "totalamount": "total",
}


def _as_positive_int(value: Any, default: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


@web.middleware
async def request_log_middleware(request: web.Request, handler):
    start = time.perf_counter()
    resp: web.StreamResponse | None = None
    body = None
    if request.can_read_body:
        body = await request.text()
    try:
        parsed = json.loads(body) if body else None
    except ValueError:
        parsed = body
    request.app["requests"].append({
        "method": request.method,
        "path": request.path,
        "query": dict(request.query),
        "body": parsed,
        "headers": dict(request.headers),
    })
    try:
        resp = await handler(request)
        return resp
    finally:
        ms = int((time.perf_counter() - start) * 1000)
        status = getattr(resp, "status", "ERR")
        logger.info("%s %s -> %s (%dms)", request.method, request.rel_url, status, ms)


@web.middleware
async def bearer_auth_middleware(request: web.Request, handler):
    token = request.app["token"]
    if token and request.path != "/health":
        if request.headers.get("Authorization") != f"Bearer {token}":
            return web.json_response({"message": "Unauthorized"}, status=401)
    return await handler(request)


async def health(_request: web.Request) -> web.Response:
    return web.json_response({"status": "ok"})


async def list_orders(request: web.Request) -> web.Response:
    query = request.query
    page_size = _as_positive_int(query.get("pageSize"), 20)
    page = _as_positive_int(query.get("pageNumber"), 1)

    status_filter = query.get("status")
    status_code = None
    if status_filter:
        status_code = name_to_code(status_filter)
        if status_code is None and status_filter.strip().isdigit():
            status_code = int(status_filter)

    matches = []
    for order in _orders(request):
        if query.get("orderNumber") and _norm(order.get("orderNumber")) != _norm(query["orderNumber"]):
            continue
        if query.get("customerId") and _norm(order.get("customerId")) != _norm(query["customerId"]):
            continue
        if query.get("customerName") and _norm(query["customerName"]) not in _norm(order.get("customerName")):
            continue
        if query.get("email") and _norm(order.get("email")) != _norm(query["email"]):
            continue
        if status_filter and order.get("status") != status_code:
            continue
        order_day = str(order.get("orderDate") or "")[:10]
        if query.get("startDate") and order_day < query["startDate"]:
            continue
        if query.get("endDate") and order_day > query["endDate"]:
            continue
        matches.append(_with_status_text(order))

    sort_by = _norm(query.get("sortBy"))
    if sort_by:
        if sort_by not in _SORT_KEYS:
            return _failure(f"Invalid sortBy: {query['sortBy']}", 400)
        key = _SORT_KEYS[sort_by]
        descending = _norm(query.get("sortDirection") or "desc") == "desc"
        matches.sort(key=lambda o: (o.get(key) is None, o.get(key) or 0), reverse=descending)

    start = (page - 1) * page_size
    total = len(matches)
    logger.info("list orders %s -> %d", dict(query), total)
    return web.json_response(_envelope({
        "orders": matches[start:start + page_size],
        "totalCount": total,
        "page": page,
        "pageSize": page_size,
        "totalPages": -(-total // page_size),
    }))


async def get_order(request: web.Request) -> web.Response:
    order_number = request.match_info["order_number"]
    order = _find_order(request, "orderNumber", order_number)
    if order is None:
        logger.info("not found order_number=%s", order_number)
        return _failure(f"Order {order_number} not found", 404)
    return web.json_response(_envelope(_with_status_text(order)))


async def get_order_status(request: web.Request) -> web.Response:
    if not request.app["status_resource"]:
        return web.json_response({"message": "Not Found"}, status=404)
    order_number = request.match_info["order_number"]
    order = _find_order(request, "orderNumber", order_number)
    if order is None:
        return _failure(f"Order {order_number} not found", 404)
    return web.json_response(_envelope(_status_record(order)))


async def order_status_by_detail(request: web.Request) -> web.Response:
    detail_id = request.query.get("orderDetailId", "")
    if not detail_id.strip():
        return _failure("orderDetailId is required", 400)
    order = _find_order(request, "orderDetailId", detail_id)
    if order is None:
        return _failure(f"Order detail {detail_id} not found", 404)
    return web.json_response(_envelope(_status_record(order)))


async def update_order_status(request: web.Request) -> web.Response:
    detail_id = request.match_info["order_detail_id"]
    order = _find_order(request, "orderDetailId", detail_id)
    if order is None:
        return _failure(f"Order detail {detail_id} not found", 404)
    try:
        body = await request.json()
    except json.JSONDecodeError:
        return _failure("Request body must be JSON", 400)
    status_code = body.get("statusCode") if isinstance(body, dict) else None
    if code_to_name(status_code) is None:
        return _failure(f"Invalid status code: {status_code}", 400)
    order["status"] = int(status_code)
    logger.info("order detail %s -> status %s", detail_id, status_code)
    return web.json_response(_envelope(True))


async def search_products(request: web.Request) -> web.Response:
    try:
        body = await request.json()
    except json.JSONDecodeError:
        return _failure("Request body must be JSON", 400)
    if not isinstance(body, dict):
        body = {}
    search = _norm(body.get("SearchString"))
    page = _as_positive_int(body.get("PageIndex"), 1)
    page_size = _as_positive_int(body.get("PageSize"), 10)

    products = [p for p in request.app["data"].get("products") or [] if isinstance(p, dict)]
    if search:
        products = [
            p for p in products
            if search in _norm(p.get("name")) or search in _norm(p.get("code"))
        ]
    start = (page - 1) * page_size
    return web.json_response(_envelope({
        "data": products[start:start + page_size],
        "totalRecords": len(products),
    }))


def load_data(path: Optional[Path]) -> dict[str, Any]:
    """Read a dataset file, or return a copy of ``SAMPLE_DATA``."""
    if path is None or not path.exists():
        return copy.deepcopy(SAMPLE_DATA)
    return json.loads(path.read_text(encoding="utf-8"))


def create_app(
    data: Optional[dict[str, Any]] = None,
    token: Optional[str] = None,
    status_resource: bool = True,
) -> web.Application:
    """Build the mock application.

    ``status_resource=False`` answers 404 on ``GET /Orders/{n}/Status`` to
    mimic deployments without the status sub-resource.
    """
    app = web.Application(middlewares=[request_log_middleware, bearer_auth_middleware])
    app["data"] = copy.deepcopy(data) if data is not None else copy.deepcopy(SAMPLE_DATA)
    app["token"] = token
    app["status_resource"] = status_resource
    app["requests"] = []
    app.router.add_get("/health", health)
    app.router.add_get("/Orders", list_orders)
    app.router.add_get("/Orders/{order_number}", get_order)
    app.router.add_get("/Orders/{order_number}/Status", get_order_status)
    app.router.add_get("/orderstatus", order_status_by_detail)
    app.router.add_put("/Orders/{order_detail_id}/Status", update_order_status)
    app.router.add_post("/products/search", search_products)
    return app


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--port", type=int, default=8083)
    parser.add_argument("--data", type=str, default=None, help="Path to a JSON dataset")
    parser.add_argument(
        "--token",
        type=str,
        default=os.getenv("ORDER_API_TOKEN") or os.getenv("API_TOKEN"),
        help="Bearer token to require (default: ORDER_API_TOKEN)",
    )
    parser.add_argument(
        "--no-status-resource",
        action="store_true",
        help="Answer 404 on GET /Orders/{n}/Status",
    )
    args = parser.parse_args()

    configure_logging()
    data = load_data(Path(args.data) if args.data else None)
    app = create_app(data, token=args.token, status_resource=not args.no_status_resource)

    logger.info("mock order api listening on :%s using data=%s", args.port, args.data or "<sample>")
    web.run_app(app, port=args.port)


if __name__ == "__main__":
    main()
