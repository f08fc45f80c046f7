#!/usr/bin/env python3
"""
MCP server for the Solscan Pro API.

Exposes Solscan account endpoints as MCP tools: account detail, transfers,
DeFi activities, balance changes, transactions, portfolio, token accounts,
and the reward/transfer CSV exports. A `set_api_key` tool replaces the API
key for the rest of the process, and `solscan://status` is a read-only
status resource.

Wraps solscan_account.py as MCP tools.
"""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable, List, Union

import structlog
from dotenv import load_dotenv
from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import Resource, TextContent, Tool
from pydantic import AnyUrl, BaseModel, Field

# Load .env from current directory or parent directories
SERVER_DIR = Path(__file__).resolve().parent
load_dotenv(SERVER_DIR / ".env")
load_dotenv(SERVER_DIR.parent / ".env")

from solscan_account import (  # noqa: E402
    AccountBalanceChangeInput,
    AccountDefiActivitiesInput,
    AccountRewardExportInput,
    AccountTokenAccountsInput,
    AccountTransactionsInput,
    AccountTransferExportInput,
    AccountTransfersInput,
    AddressQuery,
    SolscanQuery,
    export_account_rewards,
    export_account_transfers,
    get_account_balance_change,
    get_account_defi_activities,
    get_account_detail,
    get_account_portfolio,
    get_account_token_accounts,
    get_account_transactions,
    get_account_transfers,
)
from solscan_client import MIN_API_KEY_LENGTH, SolscanSession  # noqa: E402
from solscan_logging import setup_logging  # noqa: E402

logger = structlog.get_logger(__name__)

SERVER_NAME = "mcp-solscan"
SERVER_VERSION = "0.1.0"
STATUS_URI = "solscan://status"
STATUS_TEXT = "Solscan MCP server is running."

app = Server(SERVER_NAME, version=SERVER_VERSION)
session = SolscanSession.from_env()


# ---------------------------------------------------------------------------
# Content envelope
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Structured:
    """JSON payload returned by a data tool."""

    payload: Any

    def render(self) -> Union[List[TextContent], tuple[List[TextContent], dict[str, Any]]]:
        content = [TextContent(type="text", text=json.dumps(self.payload, default=str))]
        # MCP structured content must be a JSON object
        if isinstance(self.payload, dict):
            return content, self.payload
        return content


@dataclass(frozen=True)
class Text:
    """Plain-text payload (CSV exports, confirmations)."""

    text: str

    def render(self) -> List[TextContent]:
        return [TextContent(type="text", text=self.text)]


Envelope = Union[Structured, Text]


# ---------------------------------------------------------------------------
# Tool registry
# ---------------------------------------------------------------------------


Handler = Callable[[SolscanSession, Any], Awaitable[Envelope]]


@dataclass(frozen=True)
class ToolDefinition:
    name: str
    description: str
    input_model: type[BaseModel]
    handler: Handler

    def to_tool(self) -> Tool:
        return Tool(
            name=self.name,
            description=self.description,
            inputSchema=self.input_model.model_json_schema(by_alias=True),
        )


class SetApiKeyInput(SolscanQuery):
    # Length is checked by SolscanSession.set_api_key so the failure is typed
    api_key: str = Field(
        description="Solscan Pro API key",
        json_schema_extra={"minLength": MIN_API_KEY_LENGTH},
    )


async def _handle_set_api_key(session: SolscanSession, query: SetApiKeyInput) -> Envelope:
    session.set_api_key(query.api_key)
    return Text("✅ Solscan API key set.")


def _json_tool(operation: Callable[[SolscanSession, Any], Any]) -> Handler:
    async def handler(session: SolscanSession, query: Any) -> Envelope:
        return Structured(await asyncio.to_thread(operation, session, query))

    return handler


def _csv_tool(operation: Callable[[SolscanSession, Any], str]) -> Handler:
    async def handler(session: SolscanSession, query: Any) -> Envelope:
        return Text(await asyncio.to_thread(operation, session, query))

    return handler


TOOLS: dict[str, ToolDefinition] = {
    tool.name: tool
    for tool in [
        ToolDefinition(
            name="set_api_key",
            description="Set the Solscan Pro API key for this session/process.",
            input_model=SetApiKeyInput,
            handler=_handle_set_api_key,
        ),
        ToolDefinition(
            name="account_detail",
            description="Get the details of an account.",
            input_model=AddressQuery,
            handler=_json_tool(get_account_detail),
        ),
        ToolDefinition(
            name="account_transfers",
            description="Get transfer data of an account.",
            input_model=AccountTransfersInput,
            handler=_json_tool(get_account_transfers),
        ),
        ToolDefinition(
            name="account_defi_activities",
            description="Get DeFi activities involving an account.",
            input_model=AccountDefiActivitiesInput,
            handler=_json_tool(get_account_defi_activities),
        ),
        ToolDefinition(
            name="account_balance_change",
            description="Get balance change activities for an account.",
            input_model=AccountBalanceChangeInput,
            handler=_json_tool(get_account_balance_change),
        ),
        ToolDefinition(
            name="account_transactions",
            description="Get the list of transactions of an account.",
            input_model=AccountTransactionsInput,
            handler=_json_tool(get_account_transactions),
        ),
        ToolDefinition(
            name="account_portfolio",
            description="Get the portfolio for a given address.",
            input_model=AddressQuery,
            handler=_json_tool(get_account_portfolio),
        ),
        ToolDefinition(
            name="account_token_accounts",
            description="Get token accounts (or NFTs) of an account.",
            input_model=AccountTokenAccountsInput,
            handler=_json_tool(get_account_token_accounts),
        ),
        ToolDefinition(
            name="account_reward_export",
            description="Export staking rewards to CSV (as text).",
            input_model=AccountRewardExportInput,
            handler=_csv_tool(export_account_rewards),
        ),
        ToolDefinition(
            name="account_transfer_export",
            description="Export account transfers to CSV (as text).",
            input_model=AccountTransferExportInput,
            handler=_csv_tool(export_account_transfers),
        ),
    ]
}


# ---------------------------------------------------------------------------
# MCP handlers
# ---------------------------------------------------------------------------


@app.list_tools()
async def list_tools() -> List[Tool]:
    return [tool.to_tool() for tool in TOOLS.values()]


# Input is validated by the pydantic models so typed errors reach the caller
@app.call_tool(validate_input=False)
async def call_tool(name: str, arguments: Any):
    tool = TOOLS.get(name)
    if tool is None:
        raise ValueError(f"Unknown tool: {name}")

    log = logger.bind(tool=name)
    log.debug("tool_called")
    try:
        query = tool.input_model.model_validate(arguments or {})
        envelope = await tool.handler(session, query)
    except Exception as exc:
        log.warning("tool_failed", error_type=type(exc).__name__)
        raise

    log.debug("tool_succeeded", envelope=type(envelope).__name__)
    return envelope.render()


@app.list_resources()
async def list_resources() -> List[Resource]:
    return [
        Resource(
            uri=AnyUrl(STATUS_URI),
            name="status",
            description="Solscan MCP server status.",
            mimeType="text/plain",
        )
    ]


@app.read_resource()
async def read_resource(uri: AnyUrl) -> str:
    if str(uri).rstrip("/") != STATUS_URI:
        raise ValueError(f"Unknown resource: {uri}")
    return STATUS_TEXT


async def main() -> None:
    setup_logging()
    logger.info(
        "server_starting",
        base_url=session.base_url,
        api_key_configured=bool(session.api_key),
    )
    async with stdio_server() as (read_stream, write_stream):
        await app.run(read_stream, write_stream, app.create_initialization_options())


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
