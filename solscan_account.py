"""
Solscan account endpoints.

Each endpoint has an input model describing exactly which query fields it
accepts (enumerations and numeric bounds included) and a function that
forwards a validated model to the Solscan Pro API.

Implements:
- Account detail and portfolio
- Transfers, DeFi activities, balance changes, transactions
- Token accounts (fungible or NFT)
- Reward and transfer CSV exports
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

from solscan_client import SolscanSession, solscan_get

TransferActivity = Literal[
    "ACTIVITY_SPL_TRANSFER",
    "ACTIVITY_SPL_BURN",
    "ACTIVITY_SPL_MINT",
    "ACTIVITY_SPL_CREATE_ACCOUNT",
]

DefiActivity = Literal[
    "ACTIVITY_TOKEN_SWAP",
    "ACTIVITY_AGG_TOKEN_SWAP",
    "ACTIVITY_TOKEN_ADD_LIQ",
    "ACTIVITY_TOKEN_REMOVE_LIQ",
    "ACTIVITY_SPL_TOKEN_STAKE",
    "ACTIVITY_SPL_TOKEN_UNSTAKE",
    "ACTIVITY_SPL_TOKEN_WITHDRAW_STAKE",
    "ACTIVITY_SPL_INIT_MINT",
]


def _whole_number(value: Any) -> Any:
    # JSON clients may send 2.0 for 2
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


Integer = Annotated[int, BeforeValidator(_whole_number)]
Number = Union[int, float]
Flow = Literal["in", "out"]
SortOrder = Literal["asc", "desc"]


# ---------------------------------------------------------------------------
# Input models
# ---------------------------------------------------------------------------


class SolscanQuery(BaseModel):
    """Base for endpoint inputs. Unknown fields are dropped, never forwarded."""

    model_config = ConfigDict(strict=True, populate_by_name=True, extra="ignore")

    def to_params(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class AddressQuery(SolscanQuery):
    address: str = Field(description="Solana account address")


class TransferFilters(AddressQuery):
    """Filters shared by the transfer list and the transfer CSV export."""

    activity_type: list[TransferActivity] | None = None
    token_account: str | None = None
    from_: str | None = Field(default=None, alias="from")
    to: str | None = None
    token: str | None = None
    amount: list[Union[str, Number]] | None = Field(
        default=None, max_length=2, description="[min, max] amount range"
    )
    from_time: Number | None = None
    to_time: Number | None = None
    exclude_amount_zero: bool | None = None
    flow: Flow | None = None


class AccountTransfersInput(TransferFilters):
    page: Integer | None = Field(default=None, ge=1)
    page_size: Integer | None = Field(default=None, ge=1, le=100)
    sort_by: Literal["block_time"] | None = None
    sort_order: SortOrder | None = None
    value: list[Union[str, Number]] | None = Field(
        default=None, max_length=2, description="[min, max] USD value range"
    )
    block_time: list[Number] | None = Field(default=None, max_length=2)


class AccountTransferExportInput(TransferFilters):
    block_time: list[Number] | None = Field(default=None, max_length=2)


class AccountDefiActivitiesInput(AddressQuery):
    activity_type: list[DefiActivity] | None = None
    from_: str | None = Field(default=None, alias="from")
    platform: list[str] | None = Field(default=None, max_length=5)
    source: list[str] | None = Field(default=None, max_length=5)
    token: str | None = None
    from_time: Number | None = None
    to_time: Number | None = None
    page: Integer | None = Field(default=None, ge=1)
    page_size: Integer | None = Field(default=None, ge=1, le=100)
    sort_by: Literal["block_time"] | None = None
    sort_order: SortOrder | None = None
    block_time: list[Number] | None = Field(default=None, max_length=2)


class AccountBalanceChangeInput(AddressQuery):
    token_account: str | None = None
    token: str | None = None
    from_time: Number | None = None
    to_time: Number | None = None
    page_size: Integer | None = Field(default=None, ge=1, le=100)
    page: Integer | None = Field(default=None, ge=1)
    remove_spam: Literal["true", "false"] | None = None
    amount: list[Union[str, Number]] | None = Field(default=None, max_length=2)
    flow: Flow | None = None
    sort_by: Literal["block_time"] | None = None
    sort_order: SortOrder | None = None
    block_time: list[Number] | None = Field(default=None, max_length=2)


class AccountTransactionsInput(AddressQuery):
    before: str | None = Field(default=None, description="Signature to page before")
    limit: Integer | None = Field(default=None, ge=10, le=40)


class AccountTokenAccountsInput(AddressQuery):
    type: Literal["token", "nft"]
    page: Integer | None = Field(default=None, ge=1)
    page_size: Integer | None = Field(default=None, ge=10, le=40)
    hide_zero: bool | None = None


class AccountRewardExportInput(AddressQuery):
    time_from: Number | None = None
    time_to: Number | None = None


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


def get_account_detail(session: SolscanSession, query: AddressQuery) -> Any:
    return solscan_get(session, "/account/detail", query.to_params())


def get_account_transfers(session: SolscanSession, query: AccountTransfersInput) -> Any:
    return solscan_get(session, "/account/transfer", query.to_params())


def get_account_defi_activities(
    session: SolscanSession,
    query: AccountDefiActivitiesInput,
) -> Any:
    return solscan_get(session, "/account/defi/activities", query.to_params())


def get_account_balance_change(
    session: SolscanSession,
    query: AccountBalanceChangeInput,
) -> Any:
    return solscan_get(session, "/account/balance_change", query.to_params())


def get_account_transactions(
    session: SolscanSession,
    query: AccountTransactionsInput,
) -> Any:
    """
    Get recent transactions of an account.

    Use `before` with the last signature of a page to fetch the next one.
    """
    return solscan_get(session, "/account/transactions", query.to_params())


def get_account_portfolio(session: SolscanSession, query: AddressQuery) -> Any:
    return solscan_get(session, "/account/portfolio", query.to_params())


def get_account_token_accounts(
    session: SolscanSession,
    query: AccountTokenAccountsInput,
) -> Any:
    """Token accounts of an address, or its NFTs when type is "nft"."""
    return solscan_get(session, "/account/token-accounts", query.to_params())


def export_account_rewards(session: SolscanSession, query: AccountRewardExportInput) -> str:
    """Staking rewards as CSV text."""
    return solscan_get(session, "/account/reward/export", query.to_params(), expect="text")


def export_account_transfers(
    session: SolscanSession,
    query: AccountTransferExportInput,
) -> str:
    """Transfers as CSV text."""
    return solscan_get(session, "/account/transfer/export", query.to_params(), expect="text")
