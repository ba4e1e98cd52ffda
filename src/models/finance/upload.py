"""Transaction upload and currency detection models."""

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class FailedTransaction(BaseModel):
    """A row the backend rejected while importing an uploaded file."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str | None = Field(None, description="Stored error row ID, if persisted")
    row_number: int | None = Field(
        None,
        validation_alias=AliasChoices("row_number", "row", "line"),
        description="1-based row number in the uploaded file",
    )
    error: str = Field(
        "",
        validation_alias=AliasChoices("error", "error_message", "message"),
        description="Why the row was rejected",
    )
    data: dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("data", "raw_data", "transaction"),
        description="Raw row content as parsed by the backend",
    )


class UploadResult(BaseModel):
    """Backend response to a transaction file upload."""

    message: str = ""
    processed_count: int = Field(
        0,
        validation_alias=AliasChoices(
            "processed_count", "successful_count", "success_count"
        ),
    )
    failed_count: int = Field(0, validation_alias=AliasChoices("failed_count", "error_count"))
    failed_transactions: list[FailedTransaction] = Field(default_factory=list)

    @property
    def has_failures(self) -> bool:
        return bool(self.failed_transactions) or self.failed_count > 0


class CurrencyDetection(BaseModel):
    """Result of the backend's currency detection for an upload file."""

    currency: str | None = Field(
        None,
        validation_alias=AliasChoices("currency", "detected_currency"),
    )
    confidence: float | None = None
