"""Wallet transaction data models."""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

DEFAULT_CURRENCY = "USD"


class Transaction(BaseModel):
    """Represents a single transaction row returned by the backend.

    The backend owns the sign convention of ``transaction_amount``: negative
    amounts leave the wallet, positive amounts enter it. ``transaction_type``
    is passed through as sent; BUY and SELL drive the deposit/income views.
    """

    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str = Field(..., description="Transaction ID (unique per wallet)")
    wallet_id: str | None = Field(None, description="Owning wallet ID")
    date: str = Field(
        ...,
        validation_alias=AliasChoices("date", "transaction_date"),
        description="ISO calendar date of the transaction",
    )
    asset_name: str = Field("", description="Traded asset name")
    asset_type: str | None = Field(None, description="Asset type (informational)")
    transaction_type: str | None = Field(
        None, description="BUY, SELL, or any other backend-defined type"
    )
    volume: float = Field(0.0, description="Units traded")
    item_price: float = Field(0.0, description="Price per unit")
    transaction_amount: float = Field(
        0.0, description="Signed cash amount of the transaction"
    )
    fee: float = Field(0.0, description="Fee charged for the transaction")
    currency: str = Field(DEFAULT_CURRENCY, description="ISO 4217 currency code")
    created_at: str | None = Field(None, description="When the row was stored")

    @field_validator("volume", "item_price", "transaction_amount", "fee", mode="before")
    @classmethod
    def _none_to_zero(cls, v: object) -> object:
        return 0.0 if v is None or v == "" else v

    @field_validator("currency", mode="before")
    @classmethod
    def _default_currency(cls, v: object) -> object:
        if v is None or (isinstance(v, str) and not v.strip()):
            return DEFAULT_CURRENCY
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @property
    def normalized_type(self) -> str:
        """Upper-cased transaction type ('' when missing)."""
        return (self.transaction_type or "").strip().upper()

    @property
    def month_key(self) -> str:
        """Calendar month bucket in ``YYYY-MM`` form."""
        return self.date[:7]
