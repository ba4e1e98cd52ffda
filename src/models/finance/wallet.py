"""Wallet data models."""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from .transaction import Transaction


class Wallet(BaseModel):
    """A named container of transactions (one account or portfolio).

    ``transactions`` only ever holds the currently loaded page, so
    ``balance`` may come from the server summary or be recomputed from that
    page. The two are not guaranteed to agree.
    """

    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str = Field(..., description="Wallet ID")
    name: str = Field(..., description="Display name")
    balance: float = Field(0.0, description="Wallet balance")
    transactions: list[Transaction] = Field(
        default_factory=list, description="Currently loaded transaction page"
    )
    total_transaction_count: int | None = Field(
        None,
        validation_alias=AliasChoices(
            "total_transaction_count", "transaction_count", "totalTransactionCount"
        ),
        description="Server-side transaction count for this wallet",
    )

    @field_validator("balance", mode="before")
    @classmethod
    def _none_to_zero(cls, v: object) -> object:
        return 0.0 if v is None or v == "" else v

    @property
    def known_transaction_count(self) -> int:
        """Server count when known, otherwise the loaded row count."""
        if self.total_transaction_count is not None:
            return self.total_transaction_count
        return len(self.transactions)

    def with_page(self, transactions: list[Transaction], total_count: int) -> "Wallet":
        """Return a copy holding ``transactions`` with a recomputed balance."""
        return self.model_copy(
            update={
                "transactions": list(transactions),
                "balance": sum(t.transaction_amount for t in transactions),
                "total_transaction_count": total_count,
            }
        )
