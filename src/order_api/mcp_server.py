"""MCP tool server exposing the order and product tools.

Out-of-process hosting mode: each MCP tool calls the same tool function
an in-process agent would call and renders the result as text with
``presenter``, so both hosting modes give the model the same facts.

Run over stdio::

    python -m src.order_api.mcp_server
"""

from __future__ import annotations

import logging
import sys
from typing import Annotated, Optional

from fastmcp import FastMCP
from pydantic import Field

from src.tools import order_tool, product_tool

from . import presenter
from .set_logging import configure_logging

logger = logging.getLogger(__name__)

mcp = FastMCP("order-tools")


async def get_orders(
    order_number: Annotated[Optional[str], Field(description="Specific order number to search for")] = None,
    customer_id: Annotated[Optional[str], Field(description="Customer ID to filter orders")] = None,
    customer_name: Annotated[Optional[str], Field(description="Customer name to search for")] = None,
    email: Annotated[Optional[str], Field(description="Customer email to search for")] = None,
    status: Annotated[Optional[str], Field(description="Order status filter, e.g. Shipped")] = None,
    start_date: Annotated[Optional[str], Field(description="Start date (YYYY-MM-DD)")] = None,
    end_date: Annotated[Optional[str], Field(description="End date (YYYY-MM-DD)")] = None,
    page_size: Annotated[int, Field(description="Orders per page (default: 20, max: 100)")] = 20,
    page_number: Annotated[int, Field(description="Page number (default: 1)")] = 1,
    sort_by: Annotated[
        Optional[str], Field(description="OrderNumber, CreatedDate, Status or TotalAmount (default: CreatedDate)")
    ] = None,
    sort_direction: Annotated[Optional[str], Field(description="Asc or Desc (default: Desc)")] = None,
) -> str:
    """Retrieve a paginated list of orders filtered by number, customer, status or date range."""
    result = await order_tool.query_orders(
        order_number=order_number,
        customer_id=customer_id,
        customer_name=customer_name,
        email=email,
        status=status,
        start_date=start_date,
        end_date=end_date,
        page_size=page_size,
        page_number=page_number,
        sort_by=sort_by,
        sort_direction=sort_direction,
    )
    return presenter.format_order_list(result)


async def get_order_details(
    order_number: Annotated[str, Field(description="The order number, e.g. ORD12")]
) -> str:
    """Get the details of one order, including the order detail ID used for status updates."""
    return presenter.format_order_details(await order_tool.get_order_details(order_number))


async def get_order_status(
    order_number: Annotated[str, Field(description="The order number, e.g. ORD12")]
) -> str:
    """Get the current status and order detail ID of one order."""
    return presenter.format_order_status(await order_tool.get_order_status(order_number))


async def get_order_status_by_detail_id(
    order_detail_id: Annotated[str | int, Field(description="The order detail ID (not the order number)")]
) -> str:
    """Get the current status of an order by its order detail ID."""
    result = await order_tool.get_order_status_by_detail_id(order_detail_id)
    return presenter.format_detail_status(result)


async def update_order_status(
    order_detail_id: Annotated[str | int, Field(description="The order detail ID (not the order number)")],
    status: Annotated[str | int, Field(description="New status name or code, e.g. Shipped or 12")],
) -> str:
    """Update the status of an order. This is a command operation that modifies order data."""
    result = await order_tool.update_order_status(order_detail_id, status)
    return presenter.format_status_update(result)


async def search_products(
    search_string: Annotated[str, Field(description="Search string to filter products by name or code")] = "",
    page_index: Annotated[int, Field(description="Page number (default: 1)")] = 1,
    page_size: Annotated[int, Field(description="Products per page (default: 10, max: 100)")] = 10,
) -> str:
    """Search for products by search string with pagination. Returns product and SKU details."""
    result = await product_tool.search_products(search_string, page_index, page_size)
    return presenter.format_product_search(result)


MCP_TOOLS = [
    get_orders,
    get_order_details,
    get_order_status,
    get_order_status_by_detail_id,
    update_order_status,
    search_products,
]

for _tool in MCP_TOOLS:
    mcp.tool()(_tool)


def main() -> None:
    # stdout is the MCP transport
    configure_logging(stream=sys.stderr)
    logger.info("Starting order-tools MCP server with %d tools", len(MCP_TOOLS))
    mcp.run()


if __name__ == "__main__":
    main()
