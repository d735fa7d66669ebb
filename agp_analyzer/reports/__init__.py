"""Summary record sets for the report renderer."""

from agp_analyzer.reports.bundle import (
    METRIC_DEFINITIONS,
    PeriodSummary,
    SummaryBundle,
    SummaryBundleBuilder,
    SummaryRecord,
    reading_identifier,
)

__all__ = [
    "METRIC_DEFINITIONS",
    "PeriodSummary",
    "SummaryBundle",
    "SummaryBundleBuilder",
    "SummaryRecord",
    "reading_identifier",
]
