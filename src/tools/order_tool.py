"""Order management tools: search, details, status lookups and status update.

These tools let the agent read orders from the order query service and
change an order's status through the order command service.

Example scenario:
    User:  "Has order ORD12 shipped yet?"
    Agent: → get_order_status(order_number="ORD12")
           → "Order ORD12 is Processing (detail ID 4711)."
    User:  "Mark it as shipped."
    Agent: → update_order_status(order_detail_id="4711", status="Shipped")
"""

from __future__ import annotations

import logging
from typing import Annotated, Any, Optional
from urllib.parse import quote

from pydantic import Field

from src.order_api.client import call_api
from src.order_api.config import TargetService
from src.order_api.errors import ContractMismatchError, ValidationError
from src.order_api.status_codes import code_to_name, name_to_code, resolve_status

from .base_tool import (
    FieldCandidates,
    as_int,
    as_str,
    clamp_page_size,
    error_result,
    items_length,
    page_or_default,
    total_pages,
    unwrap_envelope,
    validate_iso_date,
)

logger = logging.getLogger(__name__)

DEFAULT_ORDER_PAGE_SIZE = 20
ORDER_SORT_FIELDS = ("OrderNumber", "CreatedDate", "Status", "TotalAmount")
SORT_DIRECTIONS = ("Asc", "Desc")

# Field candidates, evaluated left to right
ORDER_ID = FieldCandidates("orderId", "id", default=0)
ORDER_DETAIL_ID = FieldCandidates("orderDetailId", "id")
# List rows carry both ids; "id" there is the order id, never the detail id
SUMMARY_DETAIL_ID = FieldCandidates("orderDetailId", default=0)
ORDER_STATUS = FieldCandidates("status", "orderStatus", "orderStatusName", "statusText")
ORDER_STATUS_CODE = FieldCandidates("statusCode", "orderStatusId")
SUMMARY_STATUS_TEXT = FieldCandidates("statusText", "orderStatusName", "status", "orderStatus")
SUMMARY_STATUS_CODE = FieldCandidates("statusCode", "orderStatusId", "status")
CUSTOMER = FieldCandidates("customerName", "customer")
ORDER_TOTAL = FieldCandidates("total", "orderTotal")
ITEM_COUNT = FieldCandidates("itemCount", items_length, default=0)


def _status_of(
    record: dict, names: FieldCandidates, codes: FieldCandidates
) -> tuple[Optional[str], Optional[int]]:
    """Read a status name and code, filling whichever is missing from the registry."""
    name = names.pick(record)
    code = codes.pick(record)
    if isinstance(name, int) and not isinstance(name, bool):
        # Numeric status fields carry the code, not a name
        code = name if code is None else code
        name = None
    if isinstance(code, str):
        code = int(code) if code.strip().isdigit() else name_to_code(code)
    if name is None and code is not None:
        name = code_to_name(code)
    if code is None and isinstance(name, str):
        code = name_to_code(name)
    return name, code


def summarize_order(order: dict) -> dict[str, Any]:
    """Project an order list entry onto the fixed OrderSummary fields."""
    status_text, status_code = _status_of(order, SUMMARY_STATUS_TEXT, SUMMARY_STATUS_CODE)
    return {
        "orderId": as_int(ORDER_ID.pick(order)),
        "orderKey": order.get("orderKey"),
        "orderNumber": as_str(order.get("orderNumber")),
        "status": status_code or 0,
        "statusText": status_text or "",
        "orderDate": order.get("orderDate"),
        "createdDate": order.get("createdDate"),
        "modifiedDate": order.get("modifiedDate"),
        "itemCount": as_int(ITEM_COUNT.pick(order)),
        "orderDetailId": SUMMARY_DETAIL_ID.pick(order),
    }


def _order_view(order_number: str, order: dict) -> dict[str, Any]:
    status, status_code = _status_of(order, ORDER_STATUS, ORDER_STATUS_CODE)
    return {
        "orderNumber": order_number,
        "orderDetailId": ORDER_DETAIL_ID.pick(order),
        "status": status,
        "statusCode": status_code,
        "orderDate": order.get("orderDate"),
        "customer": CUSTOMER.pick(order),
        "total": ORDER_TOTAL.pick(order),
        "itemCount": as_int(ITEM_COUNT.pick(order)),
    }


def _order_path(order_number: str, suffix: str = "") -> str:
    return f"/Orders/{quote(order_number, safe='')}{suffix}"


def _require_order(payload: Any) -> dict:
    order = unwrap_envelope(payload)
    if not isinstance(order, dict):
        raise ContractMismatchError(payload=payload)
    return order


def _clean(value: Any) -> str:
    return "" if value is None else str(value).strip()


def _sort_option(value: Optional[str], choices: tuple[str, ...], label: str) -> Optional[str]:
    """Match ``value`` case-insensitively against ``choices``; blank means upstream default."""
    value = _clean(value)
    if not value:
        return None
    for choice in choices:
        if choice.lower() == value.lower():
            return choice
    raise ValidationError(f"Invalid {label}: {value}. Valid values: {', '.join(choices)}")


async def query_orders(
    order_number: Annotated[Optional[str], Field(description="Specific order number to search for")] = None,
    customer_id: Annotated[Optional[str], Field(description="Customer ID to filter orders")] = None,
    customer_name: Annotated[Optional[str], Field(description="Customer name to search for")] = None,
    email: Annotated[Optional[str], Field(description="Customer email to search for")] = None,
    status: Annotated[
        Optional[str],
        Field(description="Order status filter (e.g. 'Processing', 'Shipped', 'Completed', 'Canceled')"),
    ] = None,
    start_date: Annotated[
        Optional[str], Field(description="Start date for filtering orders (ISO format: YYYY-MM-DD)")
    ] = None,
    end_date: Annotated[
        Optional[str], Field(description="End date for filtering orders (ISO format: YYYY-MM-DD)")
    ] = None,
    page_size: Annotated[
        int, Field(description="Number of results per page (default: 20, max: 100)", ge=1)
    ] = DEFAULT_ORDER_PAGE_SIZE,
    page_number: Annotated[int, Field(description="Page number (default: 1)", ge=1)] = 1,
    sort_by: Annotated[
        Optional[str],
        Field(description="Field to sort by: OrderNumber, CreatedDate, Status or TotalAmount (default: CreatedDate)"),
    ] = None,
    sort_direction: Annotated[
        Optional[str], Field(description="Sort direction: Asc or Desc (default: Desc)")
    ] = None,
) -> Any:
    """Search and list orders. Use this to find orders by order number, customer, status or date range."""
    effective_size = clamp_page_size(page_size, DEFAULT_ORDER_PAGE_SIZE)
    page = page_or_default(page_number)
    try:
        start = validate_iso_date(start_date, "start date")
        end = validate_iso_date(end_date, "end date")
    except ValidationError as exc:
        return error_result(str(exc), "Please provide dates in the format YYYY-MM-DD and try again.")
    try:
        sort_field = _sort_option(sort_by, ORDER_SORT_FIELDS, "sort field")
        direction = _sort_option(sort_direction, SORT_DIRECTIONS, "sort direction")
    except ValidationError as exc:
        return error_result(str(exc), "Please choose a supported sort field and direction and try again.")

    query_params = {"pageSize": effective_size, "pageNumber": page}
    filters = {
        "orderNumber": order_number,
        "customerId": customer_id,
        "customerName": customer_name,
        "email": email,
        "status": status,
        "startDate": start,
        "endDate": end,
        "sortBy": sort_field,
        "sortDirection": direction,
    }
    query_params.update({key: value for key, value in filters.items() if value})
    logger.info("Orders query: %s", query_params)

    result = await call_api("/Orders", query_params=query_params)
    if not result.success:
        return error_result(
            result.error,
            "Failed to retrieve orders. Please check the search criteria and try again.",
        )

    listing = unwrap_envelope(result.data)
    if not isinstance(listing, dict):
        logger.info("Orders query returned no envelope, passing payload through")
        return result.data

    orders = [summarize_order(o) for o in listing.get("orders") or [] if isinstance(o, dict)]
    total_count = as_int(listing.get("totalCount"))
    shown_page = as_int(listing.get("page"), page)
    shown_size = as_int(listing.get("pageSize"), effective_size)
    pages = as_int(listing.get("totalPages"), total_pages(total_count, shown_size))
    return {
        "orders": orders,
        "pagination": {
            "totalCount": total_count,
            "page": shown_page,
            "pageSize": shown_size,
            "totalPages": pages,
        },
        "message": f"Found {total_count} orders (showing page {shown_page} of {pages})",
    }


async def get_order_details(
    order_number: Annotated[str, Field(description="The order number to get details for, e.g. ORD12")]
) -> Any:
    """Get detailed information about one order, including the order detail ID needed for status updates."""
    order_number = _clean(order_number)
    logger.info("Order details: %s", order_number)
    if not order_number:
        return error_result("Missing order number", "Please provide the order number to look up.")

    result = await call_api(_order_path(order_number))
    if not result.success:
        return error_result(result.error, f"Could not find order with number: {order_number}")

    order = unwrap_envelope(result.data)
    if not isinstance(order, dict):
        logger.info("Order details for %s returned no envelope, passing payload through", order_number)
        return result.data

    view = _order_view(order_number, order)
    view["fullDetails"] = order
    view["message"] = f"Order details for {order_number} (Detail ID: {view['orderDetailId']})"
    return view


async def get_order_status(
    order_number: Annotated[str, Field(description="The order number to check status for, e.g. ORD12")]
) -> dict:
    """Get the current status of an order. Also returns the order detail ID needed for status updates."""
    order_number = _clean(order_number)
    logger.info("Order status: %s", order_number)
    if not order_number:
        return error_result("Missing order number", "Please provide the order number to check.")

    source = "status"
    result = await call_api(_order_path(order_number, "/Status"))
    if not result.success:
        logger.info(
            "Status resource unavailable for %s (%s), falling back to order details",
            order_number,
            result.error,
        )
        source = "details"
        result = await call_api(_order_path(order_number))
        if not result.success:
            return error_result(result.error, f"Could not retrieve status for order: {order_number}")

    try:
        order = _require_order(result.data)
    except ContractMismatchError as exc:
        logger.warning("Unexpected status payload for %s: %r", order_number, exc.payload)
        return error_result(str(exc), f"Could not parse status for order: {order_number}")

    view = _order_view(order_number, order)
    view["status"] = view["status"] or "Unknown"
    view["source"] = source
    view["message"] = (
        f"Order {order_number} status: {view['status']} (Detail ID: {view['orderDetailId']})"
    )
    return view


async def get_order_status_by_detail_id(
    order_detail_id: Annotated[
        str | int,
        Field(description="The order detail ID (from get_order_details or query_orders), not the order number"),
    ]
) -> dict:
    """Get the current status of an order by its order detail ID."""
    detail_id = _clean(order_detail_id)
    logger.info("Order status by detail id: %s", detail_id)
    if not detail_id:
        return error_result("Missing order detail ID", "Please provide the orderDetailId to check.")

    result = await call_api("/orderstatus", query_params={"orderDetailId": detail_id})
    if not result.success:
        return error_result(result.error, f"Could not retrieve status for order detail ID: {detail_id}")

    try:
        record = _require_order(result.data)
    except ContractMismatchError as exc:
        logger.warning("Unexpected status payload for detail %s: %r", detail_id, exc.payload)
        return error_result(str(exc), f"Could not parse status for order detail ID: {detail_id}")

    status, status_code = _status_of(record, ORDER_STATUS, ORDER_STATUS_CODE)
    reported_id = ORDER_DETAIL_ID.pick(record)
    return {
        "orderDetailId": detail_id if reported_id is None else reported_id,
        "status": status or "Unknown",
        "statusCode": status_code,
        "message": f"Order detail {detail_id} status: {status or 'Unknown'}",
    }


async def update_order_status(
    order_detail_id: Annotated[
        str | int,
        Field(description="The order detail ID (from get_order_status or get_order_details), not the order number"),
    ],
    status: Annotated[
        str | int,
        Field(description="The new status name or code (e.g. 'Processing', 'Shipped', 'Delivered', 'Canceled', 12)"),
    ],
) -> dict:
    """Update the status of an order by its order detail ID. Look the order up first to obtain that ID."""
    detail_id = _clean(order_detail_id)
    logger.info("Order status update: detail_id=%s status=%s", detail_id, status)
    if not detail_id:
        return error_result(
            "Missing order detail ID",
            "Please provide the orderDetailId from get_order_status or get_order_details (not the order number).",
        )
    try:
        target = resolve_status(status)
    except ValidationError as exc:
        names = ", ".join(choice["name"] for choice in exc.choices)
        return error_result(str(exc), f"Please use one of: {names}", availableStatuses=exc.choices)

    result = await call_api(
        _order_path(detail_id, "/Status"),
        method="PUT",
        body={"statusCode": int(target)},
        service=TargetService.ORDER_COMMANDS,
    )
    if not result.success:
        return error_result(
            result.error,
            f"Failed to update status for order detail ID {detail_id}. "
            "Make sure you're using the orderDetailId (not orderNumber).",
        )

    payload = result.data
    if isinstance(payload, dict) and payload.get("isSuccess") and payload.get("response") is not False:
        return {
            "success": True,
            "orderDetailId": order_detail_id,
            "newStatus": target.label,
            "statusCode": int(target),
            "message": (
                f"Order (Detail ID: {detail_id}) status updated to {target.label} (code: {int(target)})"
            ),
        }

    logger.warning("Status update for %s not confirmed: %r", detail_id, payload)
    return error_result(
        "Failed to update status",
        f"Could not update status for order detail ID {detail_id}",
        response=payload,
    )
