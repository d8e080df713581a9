"""Order and product tools for tool-calling agents.

Each tool follows the function-calling pattern used by agent SDKs:
- Type-annotated parameters with Pydantic Field descriptions
- Docstrings used by the LLM to understand when to call the tool
- Returns structured data (or ``{"error", "message"}``) for the agent
"""

from .order_tool import (
    get_order_details,
    get_order_status,
    get_order_status_by_detail_id,
    query_orders,
    update_order_status,
)
from .product_tool import search_products

# All tool functions to register with an in-process agent
ALL_TOOLS = [
    query_orders,
    get_order_details,
    get_order_status,
    get_order_status_by_detail_id,
    update_order_status,
    search_products,
]
