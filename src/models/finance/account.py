"""Backend user, wallet stats and mutual fund models."""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class BackendUser(BaseModel):
    """User record returned by the registration endpoint."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    user_id: str = Field(..., validation_alias=AliasChoices("user_id", "id"))
    email: str | None = None
    username: str | None = None


class WalletStats(BaseModel):
    """Server-side statistics for one wallet (or all wallets)."""

    model_config = ConfigDict(coerce_numbers_to_str=True, extra="allow")

    wallet_id: str | None = None
    total_balance: float = Field(
        0.0, validation_alias=AliasChoices("total_balance", "balance")
    )
    total_income: float = Field(0.0, validation_alias=AliasChoices("total_income", "income"))
    total_expenses: float = Field(
        0.0, validation_alias=AliasChoices("total_expenses", "expenses")
    )
    total_transactions: int = Field(
        0, validation_alias=AliasChoices("total_transactions", "transaction_count")
    )


class MutualFund(BaseModel):
    """A mutual fund tracked by the backend."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str = Field(..., validation_alias=AliasChoices("id", "_id"))
    name: str = "Unnamed Fund"
    symbol: str | None = None
    current_value: float | None = None
    total_invested: float | None = None
    last_updated: str | None = None
