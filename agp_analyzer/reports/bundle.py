"""
Summary Bundle Builder - cross-referenced AGP records over several periods.

For every requested period the builder produces one root record (the AGP
median) and one member record per metric, linked by identifier. Optionally
the source readings and their devices covering all periods are echoed once.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

import pandas as pd

from agp_analyzer.analyzers.period import PeriodAggregator
from agp_analyzer.config import AnalysisConfig
from agp_analyzer.exceptions import InvalidConfiguration
from agp_analyzer.metrics.agp_metrics import AGPMetrics
from agp_analyzer.metrics.breakpoints import Breakpoints, make_breakpoints
from agp_analyzer.metrics.period import AnalysisPeriod, PeriodSpec, union_period
from agp_analyzer.metrics.reading import Device, Reading, readings_to_frame
from agp_analyzer.reports import fhir
from agp_analyzer.utils.units import validate_unit

logger = logging.getLogger(__name__)

DISPLAY_UNIT = object()  # Placeholder for the report's target unit


@dataclass(frozen=True)
class MetricDefinition:
    """How one AGPMetrics value becomes a member record."""
    code: str
    display: str
    getter: Callable[[AGPMetrics], float]
    unit: Any  # A unit string, or DISPLAY_UNIT
    unit_code: Optional[str] = None
    loinc: Optional[Tuple[str, str]] = None
    defined_when_empty: bool = False  # Value is meaningful for empty periods


METRIC_DEFINITIONS: Tuple[MetricDefinition, ...] = (
    MetricDefinition("time-in-very-low", "Time in Very Low Range",
                     lambda m: m.time_in_ranges.very_low, "%"),
    MetricDefinition("time-in-low", "Time in Low Range",
                     lambda m: m.time_in_ranges.low, "%"),
    MetricDefinition("time-in-target", "Time in Target Range",
                     lambda m: m.time_in_ranges.target, "%"),
    MetricDefinition("time-in-high", "Time in High Range",
                     lambda m: m.time_in_ranges.high, "%"),
    MetricDefinition("time-in-very-high", "Time in Very High Range",
                     lambda m: m.time_in_ranges.very_high, "%"),
    MetricDefinition("mean-glucose", "Mean Glucose",
                     lambda m: m.glucose_statistics.mean, DISPLAY_UNIT,
                     loinc=("97507-8", "Average glucose [Mass/volume] in Interstitial fluid during Reporting Period")),
    MetricDefinition("gmi", "Glucose Management Indicator (GMI)",
                     lambda m: m.glucose_statistics.gmi, "%",
                     loinc=("97506-0", "Glucose management indicator")),
    MetricDefinition("cv", "Coefficient of Variation (CV)",
                     lambda m: m.glucose_statistics.cv, "%"),
    MetricDefinition("total-days", "Days",
                     lambda m: m.total_days, "days", unit_code="d", defined_when_empty=True),
    MetricDefinition("sensor-active-percentage", "Sensor Active Percentage",
                     lambda m: m.sensor_active_percentage, "%",
                     loinc=("97510-2", "Glucose measurements in range out of Total glucose measurements during reporting period"),
                     defined_when_empty=True),
)

AGP_CODE = "ambulatory-glucose-profile"
AGP_DISPLAY = "Ambulatory Glucose Profile"


@dataclass(frozen=True)
class SummaryRecord:
    """One metric record. value is None when undefined for the period."""
    id: str
    code: str
    display: str
    value: Optional[float]
    unit: str
    unit_code: str
    period: AnalysisPeriod
    loinc: Optional[Tuple[str, str]] = None
    members: Tuple[str, ...] = ()

    @property
    def reference(self) -> str:
        return fhir.full_url(self.id)

    def to_fhir(self, coding_system: str) -> Dict[str, Any]:
        coding = [{'system': coding_system, 'code': self.code, 'display': self.display}]
        if self.loinc:
            coding.append({'system': fhir.LOINC_SYSTEM, 'code': self.loinc[0], 'display': self.loinc[1]})
        return fhir.observation(
            self.id,
            coding,
            self.value,
            self.unit,
            self.unit_code,
            effective_period=self.period.to_dict(),
            has_member=list(self.members),
        )


@dataclass(frozen=True)
class PeriodSummary:
    """Root record and members for one analysis period."""
    period: AnalysisPeriod
    metrics: AGPMetrics
    root: SummaryRecord
    members: Tuple[SummaryRecord, ...]


@dataclass(frozen=True)
class SummaryBundle:
    """Output record set of one build."""
    summaries: Tuple[PeriodSummary, ...]
    source_readings: Tuple[Reading, ...] = ()
    devices: Tuple[Device, ...] = ()
    source_period: Optional[AnalysisPeriod] = None
    coding_system: str = "https://tx.argo.run"
    namespace: uuid.UUID = field(default=uuid.NAMESPACE_URL, repr=False)

    @property
    def records(self) -> Tuple[SummaryRecord, ...]:
        """Root and member records in order, each identifier once."""
        seen = set()
        records = []
        for summary in self.summaries:
            for record in (summary.root,) + summary.members:
                if record.id not in seen:
                    seen.add(record.id)
                    records.append(record)
        return tuple(records)

    def record(self, record_id: str) -> SummaryRecord:
        for record in self.records:
            if record.id == record_id:
                return record
        raise KeyError(record_id)

    @property
    def reading_ids(self) -> Tuple[str, ...]:
        """Identifier of each echoed reading, aligned with source_readings.

        Repeats of the same reading get an occurrence index, so every
        echoed reading keeps its own Observation.
        """
        occurrences: Dict[str, int] = {}
        ids = []
        for reading in self.source_readings:
            base = reading_identifier(reading, self.namespace)
            occurrence = occurrences.get(base, 0)
            occurrences[base] = occurrence + 1
            ids.append(reading_identifier(reading, self.namespace, occurrence))
        return tuple(ids)

    def to_fhir(self) -> Dict[str, Any]:
        """Serialize as a FHIR-style 'collection' Bundle."""
        entries = [fhir.bundle_entry(r.to_fhir(self.coding_system)) for r in self.records]
        entries.extend(fhir.bundle_entry(fhir.device_resource(d)) for d in self.devices)
        entries.extend(
            fhir.bundle_entry(fhir.reading_observation(reading_id, reading))
            for reading_id, reading in zip(self.reading_ids, self.source_readings)
        )
        return {'resourceType': 'Bundle', 'type': 'collection', 'entry': entries}


def reading_identifier(
    reading: Reading,
    namespace: uuid.UUID = uuid.NAMESPACE_URL,
    occurrence: int = 0
) -> str:
    """Identifier for an echoed reading.

    The source id when known, else a uuid5 over the reading's content. Later
    occurrences of the same reading are keyed on the occurrence index too.
    """
    base = reading.id or str(uuid.uuid5(
        namespace,
        f"{reading.timestamp.isoformat()}|{reading.value!r}|{reading.unit}|{reading.device_ref or ''}",
    ))
    if occurrence == 0:
        return base
    return str(uuid.uuid5(namespace, f"{base}|{occurrence}"))


class SummaryBundleBuilder:
    """Builds SummaryBundles. Keeps no state between builds."""

    def __init__(self, config: Optional[AnalysisConfig] = None):
        self.config = config or AnalysisConfig()
        self.namespace = uuid.uuid5(uuid.NAMESPACE_URL, self.config.report.coding_system)

    # =========================================================================
    # PERIOD RESOLUTION
    # =========================================================================

    def default_period_specs(self) -> List[PeriodSpec]:
        report = self.config.report
        return [PeriodSpec.trailing(report.trailing_days, report.anchor)]

    def resolve_periods(
        self,
        period_specs: Sequence[PeriodSpec],
        frame: pd.DataFrame,
        today: date
    ) -> List[AnalysisPeriod]:
        """Resolve every spec to concrete dates before any computation."""
        if len(period_specs) == 0:
            raise InvalidConfiguration("At least one analysis period must be provided")

        latest = frame['date'].max() if len(frame) else None
        specs = [PeriodSpec.from_dict(s) if isinstance(s, dict) else s for s in period_specs]
        return [spec.resolve(today, latest) for spec in specs]

    # =========================================================================
    # RECORDS
    # =========================================================================

    def _record_id(self, *parts: str) -> str:
        return str(uuid.uuid5(self.namespace, "|".join(parts)))

    def summarize_period(self, metrics: AGPMetrics) -> PeriodSummary:
        """Build the root and member records for one period's metrics."""
        period = metrics.period
        root_id = self._record_id(AGP_CODE, period.start.isoformat(), period.end.isoformat(), metrics.unit)

        members = []
        for definition in METRIC_DEFINITIONS:
            unit = metrics.unit if definition.unit is DISPLAY_UNIT else definition.unit
            value = definition.getter(metrics)
            if metrics.degenerate and not definition.defined_when_empty:
                value = None
            members.append(
                SummaryRecord(
                    id=self._record_id(root_id, definition.code),
                    code=definition.code,
                    display=definition.display,
                    value=value,
                    unit=unit,
                    unit_code=definition.unit_code or unit,
                    period=period,
                    loinc=definition.loinc,
                )
            )

        root = SummaryRecord(
            id=root_id,
            code=AGP_CODE,
            display=AGP_DISPLAY,
            value=None if metrics.degenerate else metrics.median,
            unit=metrics.unit,
            unit_code=metrics.unit,
            period=period,
            members=tuple(m.id for m in members),
        )
        return PeriodSummary(period=period, metrics=metrics, root=root, members=tuple(members))

    # =========================================================================
    # MAIN BUILD
    # =========================================================================

    def build(
        self,
        readings: Iterable[Reading],
        period_specs: Optional[Sequence[PeriodSpec]] = None,
        include_source_data: Optional[bool] = None,
        target_unit: Optional[str] = None,
        breakpoints: Optional[Breakpoints] = None,
        devices: Iterable[Device] = (),
        today: Optional[date] = None
    ) -> SummaryBundle:
        """Build the summary record set.

        Args:
            readings: All available readings, in any order.
            period_specs: Requested periods. Configured default if None;
                          an empty list is an error.
            include_source_data: Echo readings and devices covering the
                                 union of all periods. Configured default if None.
            target_unit: Display unit. Configured default if None.
            breakpoints: Band thresholds; derived from the configured mg/dL
                         thresholds in target_unit if None.
            devices: Device records that readings may reference.
            today: Anchor for 'now' trailing periods. date.today() if None.

        Returns:
            SummaryBundle with one root+members group per period.

        Raises:
            InvalidConfiguration: Empty period list, unresolvable period,
                                  or non-monotonic breakpoints.
            InvalidUnit: Unsupported target unit.
        """
        report = self.config.report
        target_unit = validate_unit(target_unit or report.target_unit)
        if include_source_data is None:
            include_source_data = report.include_source_data
        if period_specs is None:
            period_specs = self.default_period_specs()
        if breakpoints is None:
            breakpoints = make_breakpoints(target_unit, self.config.glucose)
        else:
            breakpoints = breakpoints.validate().to(target_unit)
        aggregator = PeriodAggregator(breakpoints, self.config)

        frame = readings_to_frame(list(readings))
        periods = self.resolve_periods(period_specs, frame, today or date.today())
        logger.info("Building AGP summary for %d period(s): %s", len(periods),
                    ", ".join(f"{p.start}..{p.end}" for p in periods))

        summaries = tuple(
            self.summarize_period(aggregator.aggregate_frame(self._filter(frame, p), p))
            for p in periods
        )

        source_period = union_period(periods)
        source_readings: Tuple[Reading, ...] = ()
        source_devices: Tuple[Device, ...] = ()
        if include_source_data:
            echoed = self._filter(frame, source_period)
            source_readings = tuple(echoed['reading'])
            references = set(echoed['device_ref'].dropna())
            source_devices = tuple(d for d in devices if any(d.matches(r) for r in references))
            logger.info("Echoing %d readings and %d devices from %s..%s",
                        len(source_readings), len(source_devices),
                        source_period.start, source_period.end)

        return SummaryBundle(
            summaries=summaries,
            source_readings=source_readings,
            devices=source_devices,
            source_period=source_period,
            coding_system=report.coding_system,
            namespace=self.namespace,
        )

    @staticmethod
    def _filter(frame: pd.DataFrame, period: AnalysisPeriod) -> pd.DataFrame:
        """Readings whose calendar day falls in the period, inclusive."""
        if frame.empty:
            return frame
        mask = frame['date'].map(period.contains)
        return frame[mask.astype(bool)]
