"""Example: agent with the order and product tools (in-process hosting).

Demonstrates how to:
- Register ``ALL_TOOLS`` with an agent-framework agent
- Let the agent look up an order, then change its status by detail ID

Prerequisites:
- Azure AI Foundry project with a model deployment (e.g. gpt-4.1)
- Set AZURE_AI_PROJECT_ENDPOINT and AZURE_AI_MODEL_DEPLOYMENT_NAME in .env
- Set ORDER_QUERIES_API_BASE_URL, ORDER_COMMANDS_API_BASE_URL,
  PRODUCT_QUERIES_API_BASE_URL and ORDER_API_TOKEN, or start the mock
  services with ``python -m src.order_api.mock_api`` and point all three
  base URLs at http://localhost:8083
"""

from __future__ import annotations

import asyncio
import logging
import os
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent))

from azure.identity.aio import AzureCliCredential
from agent_framework.azure import AzureAIClient

from src.order_api.set_logging import configure_logging
from src.tools import ALL_TOOLS

logger = logging.getLogger(__name__)

INSTRUCTIONS = """You are an order management assistant.
Answer briefly and only from tool results.

Rules:
1) To change an order's status, first call get_order_status or get_order_details
   to obtain the orderDetailId, then call update_order_status with that ID.
   Never pass the order number as the order detail ID.
   When the user already gives an orderDetailId, use get_order_status_by_detail_id.
2) If a tool returns an error, tell the user the tool's message.
3) For product questions use search_products.
"""

CONVERSATION = [
    "What is the status of order ORD12?",
    "Please mark it as shipped.",
    "Do we sell any USB-C hubs?",
]


async def run_agent() -> None:
    project_endpoint = (
        os.getenv("AZURE_AI_PROJECT_ENDPOINT")
        or os.getenv("AZURE_EXISTING_AIPROJECT_ENDPOINT")
    )
    model_deployment = (
        os.getenv("AZURE_AI_MODEL_DEPLOYMENT_NAME")
        or os.getenv("MODEL_DEPLOYMENT_NAME")
    )
    if not project_endpoint:
        raise RuntimeError(
            "AZURE_AI_PROJECT_ENDPOINT is not set (or AZURE_EXISTING_AIPROJECT_ENDPOINT)."
        )
    if not model_deployment:
        raise RuntimeError(
            "AZURE_AI_MODEL_DEPLOYMENT_NAME is not set (or MODEL_DEPLOYMENT_NAME)."
        )

    async with AzureCliCredential() as credential:
        client = AzureAIClient(
            credential=credential,
            project_endpoint=project_endpoint,
            model_deployment_name=model_deployment,
        )
        agent = client.as_agent(instructions=INSTRUCTIONS, tools=ALL_TOOLS)
        thread = agent.get_new_thread()

        logger.info("Agent ready with %d tools", len(ALL_TOOLS))
        for message in CONVERSATION:
            logger.info("User: %s", message)
            result = await agent.run(message, thread=thread)
            logger.info("Agent: %s", getattr(result, "text", str(result)))


def main() -> None:
    configure_logging()
    try:
        asyncio.run(run_agent())
    except Exception as exc:
        logger.error("Agent run failed: %s", exc)
        raise


if __name__ == "__main__":
    main()
