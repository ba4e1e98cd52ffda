"""Client-side aggregate models derived from wallet transactions."""

from pydantic import BaseModel, Field, computed_field


class TransactionStats(BaseModel):
    """Sign-based income/expense split of a transaction list."""

    income: float = Field(0.0, description="Sum of positive amounts")
    expenses: float = Field(0.0, description="Sum of absolute negative amounts")

    @computed_field  # type: ignore[misc]
    @property
    def net(self) -> float:
        return self.income - self.expenses


class DepositsAndIncome(BaseModel):
    """Type-based split: BUY rows are deposits, SELL rows are income."""

    deposits: float = Field(0.0, description="Sum of |amount| over BUY rows")
    income: float = Field(0.0, description="Sum of signed amount over SELL rows")


class OverallStats(BaseModel):
    """Totals across every wallet."""

    total_balance: float = Field(0.0, description="Sum of wallet balances")
    total_transactions: int = Field(0, description="Sum of wallet transaction counts")
    deposits: float = Field(0.0, description="Sum of |amount| over BUY rows")
    income: float = Field(0.0, description="Sum of signed amount over SELL rows")


class AssetRollup(BaseModel):
    """Aggregate of every transaction sharing an asset name across wallets."""

    name: str = Field(..., description="Asset name (grouping key)")
    type: str | None = Field(None, description="First asset type seen")
    total_deposits: float = Field(0.0, description="Sum of |amount| over BUY rows")
    total_income: float = Field(0.0, description="Sum of signed amount over SELL rows")
    total_volume: float = Field(0.0, description="BUY volume minus SELL volume")
    transaction_count: int = Field(0, description="Rows folded into this asset")
    wallets: set[str] = Field(default_factory=set, description="Owning wallet names")
    currencies: set[str] = Field(default_factory=set, description="Currencies seen")
    currency: str = Field("USD", description="First currency seen")

    @computed_field  # type: ignore[misc]
    @property
    def has_mixed_currencies(self) -> bool:
        """Whether totals sum amounts denominated in different currencies."""
        return len(self.currencies) > 1


class BalancePoint(BaseModel):
    """One month of the balance-growth series."""

    date: str = Field(..., description="Month key in YYYY-MM form")
    balance: float = Field(0.0, description="Running balance at the end of the month")
    deposits: float = Field(0.0, description="Deposits made during the month")
    income: float = Field(0.0, description="Income realised during the month")
