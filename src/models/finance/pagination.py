"""Server pagination models for the transactions endpoint."""

from pydantic import AliasChoices, BaseModel, Field

from .transaction import Transaction


class PaginationDescriptor(BaseModel):
    """Server-authoritative page/limit/count tuple.

    Intended (not enforced): ``1 <= current_page <= total_pages``,
    ``has_next == current_page < total_pages`` and
    ``has_prev == current_page > 1``.
    """

    current_page: int = Field(
        1,
        validation_alias=AliasChoices("current_page", "page"),
        description="1-based page index",
    )
    limit: int = Field(1000, description="Rows per page")
    total_count: int = Field(0, description="Total rows across all pages")
    total_pages: int = Field(0, description="Total number of pages")
    has_next: bool = Field(False, description="Whether a next page exists")
    has_prev: bool = Field(False, description="Whether a previous page exists")


class TransactionPage(BaseModel):
    """One page of wallet transactions as returned by the backend."""

    transactions: list[Transaction] = Field(default_factory=list)
    total_count: int = Field(0, description="Total rows across all pages")
    total_pages: int = Field(0, description="Total number of pages")
    page: int = Field(1, description="1-based page index")
    limit: int = Field(1000, description="Rows per page")
    has_next: bool = False
    has_prev: bool = False

    def descriptor(self) -> PaginationDescriptor:
        """Pagination descriptor taken verbatim from this page."""
        return PaginationDescriptor(
            current_page=self.page,
            limit=self.limit,
            total_count=self.total_count,
            total_pages=self.total_pages,
            has_next=self.has_next,
            has_prev=self.has_prev,
        )
