"""
Result types produced by the ingestion, upsert and reconciliation paths.

These are the stable contract callers report verbatim.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

# Error details surfaced per report unless the caller overrides it
DEFAULT_ERROR_SAMPLE_SIZE = 10


class UpsertAction(str, Enum):
    """Classification of one product write."""
    INSERTED = "inserted"
    UPDATED = "updated"
    UNCHANGED = "unchanged"


@dataclass
class UpsertResult:
    """Outcome for a single product."""
    action: UpsertAction
    record_id: str
    matched_on: Optional[str] = None


@dataclass
class ErrorDetail:
    """One failed item with the best available identifier."""
    id: str
    error: str

    def to_dict(self) -> dict:
        return {"id": self.id, "error": self.error}


def _sample(details: list, max_errors: Optional[int]) -> list:
    if max_errors is None:
        return [d.to_dict() for d in details]
    return [d.to_dict() for d in details[:max_errors]]


@dataclass
class UpsertSummary:
    """Running counters for a batch of upserts."""
    seen: int = 0
    inserted: int = 0
    updated: int = 0
    unchanged: int = 0
    errors: int = 0
    error_details: list[ErrorDetail] = field(default_factory=list)

    def record(self, result: UpsertResult) -> None:
        self.seen += 1
        if result.action == UpsertAction.INSERTED:
            self.inserted += 1
        elif result.action == UpsertAction.UPDATED:
            self.updated += 1
        else:
            self.unchanged += 1

    def record_error(self, identifier: str, error: str) -> None:
        self.seen += 1
        self.errors += 1
        self.error_details.append(ErrorDetail(id=identifier, error=error))

    def merge(self, other: "UpsertSummary") -> None:
        """Fold another batch's counters into this one."""
        self.seen += other.seen
        self.inserted += other.inserted
        self.updated += other.updated
        self.unchanged += other.unchanged
        self.errors += other.errors
        self.error_details.extend(other.error_details)

    def to_dict(self, max_errors: Optional[int] = None) -> dict[str, Any]:
        """
        Convert to response format.

        Args:
            max_errors: Cap on error_details entries; errors keeps the full count
        """
        return {
            "seen": self.seen,
            "inserted": self.inserted,
            "updated": self.updated,
            "unchanged": self.unchanged,
            "errors": self.errors,
            "error_details": _sample(self.error_details, max_errors),
        }


@dataclass
class RowError:
    """A spreadsheet row that could not be mapped (1-based row number)."""
    row: int
    error: str

    def to_dict(self) -> dict:
        return {"row": self.row, "error": self.error}


@dataclass
class IngestionReport:
    """Result of ingesting one catalog file or row batch."""
    org_id: str
    rows_seen: int = 0
    rows_mapped: int = 0
    mapping_errors: list[RowError] = field(default_factory=list)
    summary: UpsertSummary = field(default_factory=UpsertSummary)
    error_sample_size: Optional[int] = field(default=None, repr=False)

    @property
    def total_errors(self) -> int:
        return len(self.mapping_errors) + self.summary.errors

    @property
    def success(self) -> bool:
        """True if no row failed to map or write."""
        return self.total_errors == 0

    def to_dict(self, max_errors: Optional[int] = None) -> dict[str, Any]:
        """
        Convert to response format.

        Args:
            max_errors: Cap on each error list; defaults to error_sample_size
        """
        if max_errors is None:
            max_errors = self.error_sample_size
        return {
            "org_id": self.org_id,
            "rows_seen": self.rows_seen,
            "rows_mapped": self.rows_mapped,
            "total_errors": self.total_errors,
            "mapping_errors_count": len(self.mapping_errors),
            "mapping_errors": _sample(self.mapping_errors, max_errors),
            "summary": self.summary.to_dict(max_errors),
        }


@dataclass
class SyncReport:
    """Result of one external catalog sync."""
    org_id: str
    shop_domain: str
    pages: int = 0
    summary: UpsertSummary = field(default_factory=UpsertSummary)
    error_sample_size: Optional[int] = field(default=None, repr=False)

    def to_dict(self, max_errors: Optional[int] = None) -> dict[str, Any]:
        if max_errors is None:
            max_errors = self.error_sample_size
        return {
            "org_id": self.org_id,
            "shop_domain": self.shop_domain,
            "pages": self.pages,
            **self.summary.to_dict(max_errors),
        }


@dataclass
class DuplicateGroup:
    """Records sharing one external-catalog identity."""
    org_id: str
    merchant_product_id: str
    duplicate_count: int


@dataclass
class ReconciliationSummary:
    """Result of one duplicate-reconciliation sweep."""
    groups_found: int = 0
    groups_merged: int = 0
    records_deleted: int = 0
    errors: int = 0
    error_details: list[ErrorDetail] = field(default_factory=list)
    error_sample_size: Optional[int] = field(default=None, repr=False)

    def to_dict(self, max_errors: Optional[int] = None) -> dict[str, Any]:
        if max_errors is None:
            max_errors = self.error_sample_size
        return {
            "groups_found": self.groups_found,
            "groups_merged": self.groups_merged,
            "records_deleted": self.records_deleted,
            "errors": self.errors,
            "error_details": _sample(self.error_details, max_errors),
        }
