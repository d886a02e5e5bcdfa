"""
SLA Engine Module

Classifies complaint snapshots into timeliness bands and aggregates
compliance and satisfaction statistics for the dashboard.

Everything here is pure: the caller captures ``now`` once and passes it
to every call in a batch, so a large batch is judged against a single
instant. Nothing reads the clock, the database or the category policy.
"""

from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal, ROUND_HALF_UP
import enum
from typing import Any, Dict, Iterable, Optional, Tuple, Union

from campusdesk.core.enums import exhaustive
from campusdesk.core.timestamps import InvalidTimestamp, parse_timestamp  # noqa: F401
from campusdesk.models.complaint import ComplaintStatus


URGENT_WINDOW = timedelta(hours=12)
WARNING_WINDOW = timedelta(hours=24)

_HOUR = timedelta(hours=1)
_MINUTE = timedelta(minutes=1)


class SLABand(str, enum.Enum):
    COMPLETED = "completed"
    OVERDUE = "overdue"
    URGENT = "urgent"
    WARNING = "warning"
    ON_TRACK = "on_track"
    NONE = "none"


class SLAUrgency(int, enum.Enum):
    """How loudly a band should be surfaced; higher is more pressing."""
    NONE = 0
    LOW = 1
    MEDIUM = 2
    HIGH = 3
    CRITICAL = 4


BAND_URGENCY = exhaustive(SLABand, {
    SLABand.COMPLETED: SLAUrgency.LOW,
    SLABand.OVERDUE: SLAUrgency.CRITICAL,
    SLABand.URGENT: SLAUrgency.HIGH,
    SLABand.WARNING: SLAUrgency.MEDIUM,
    SLABand.ON_TRACK: SLAUrgency.LOW,
    SLABand.NONE: SLAUrgency.NONE,
})


@dataclass(frozen=True)
class ComplaintSnapshot:
    """Point-in-time view of the complaint fields the SLA engine reads."""

    status: ComplaintStatus
    due_date: Optional[Union[datetime, str]] = None
    rating: Optional[int] = None

    def __post_init__(self):
        # Accept plain strings from query rows
        if not isinstance(self.status, ComplaintStatus):
            object.__setattr__(self, "status", ComplaintStatus(self.status))

        if self.rating is not None and not 1 <= self.rating <= 5:
            raise ValueError(f"rating must be between 1 and 5, got {self.rating}")

    @property
    def is_completed(self) -> bool:
        return self.status.is_completed

    @classmethod
    def from_record(cls, record: Any) -> "ComplaintSnapshot":
        """Build a snapshot from an ORM object or a mapping with status/due_date/rating."""
        if isinstance(record, dict):
            get = record.get
        else:
            def get(key):
                return getattr(record, key, None)

        return cls(
            status=get("status"),
            due_date=get("due_date"),
            rating=get("rating"),
        )


@dataclass(frozen=True)
class SLAIndicator:
    """Band plus badge text for a single complaint."""

    band: SLABand
    label: Optional[str]
    urgency: SLAUrgency

    def to_dict(self) -> dict:
        return {
            "band": self.band.value,
            "label": self.label,
            "urgency": self.urgency.name.lower(),
        }


def _normalize_now(now: datetime) -> datetime:
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now


def _evaluate(snapshot: ComplaintSnapshot, now: datetime) -> Tuple[SLABand, Optional[timedelta]]:
    if snapshot.is_completed:
        return SLABand.COMPLETED, None

    if snapshot.due_date is None:
        return SLABand.NONE, None

    remaining = parse_timestamp(snapshot.due_date) - _normalize_now(now)

    if remaining < timedelta(0):
        return SLABand.OVERDUE, remaining
    if remaining < URGENT_WINDOW:
        return SLABand.URGENT, remaining
    if remaining < WARNING_WINDOW:
        return SLABand.WARNING, remaining
    return SLABand.ON_TRACK, remaining


def classify(snapshot: ComplaintSnapshot, now: datetime) -> SLABand:
    """
    Classify a complaint into its SLA band at instant ``now``.

    Completed complaints short-circuit before the due date is parsed.

    Raises:
        InvalidTimestamp: If an open complaint carries a malformed due date
    """
    band, _ = _evaluate(snapshot, now)
    return band


def _label(band: SLABand, remaining: Optional[timedelta]) -> Optional[str]:
    if band is SLABand.COMPLETED:
        return "Completed"
    if band is SLABand.NONE:
        return None

    if band is SLABand.OVERDUE:
        return f"Overdue by {(-remaining) // _HOUR}h"

    hours = remaining // _HOUR
    if band is SLABand.URGENT:
        minutes = remaining // _MINUTE
        if minutes < 60:
            return f"{minutes}m remaining"
        return f"{hours}h remaining"
    if band is SLABand.WARNING:
        return f"{hours}h remaining"

    return f"{hours // 24}d {hours % 24}h remaining"


def indicate(snapshot: ComplaintSnapshot, now: datetime) -> SLAIndicator:
    """Classify a complaint and render its badge label and urgency."""
    band, remaining = _evaluate(snapshot, now)
    return SLAIndicator(band=band, label=_label(band, remaining), urgency=BAND_URGENCY[band])


def _round_half_up(value: Decimal, places: str) -> Decimal:
    return value.quantize(Decimal(places), rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class SLAStats:
    """
    Aggregate SLA and feedback statistics over a batch of complaints.

    Counts partition the complaints that carry a band; complaints with
    neither a due date nor a completed status count only toward ``total``.
    Partial results from shards combine with ``+``.
    """

    total: int = 0
    completed: int = 0
    overdue: int = 0
    urgent: int = 0
    warning: int = 0
    on_track: int = 0
    rating_sum: int = 0
    total_feedback: int = 0

    @property
    def compliant(self) -> int:
        # Anything not yet breached counts, including urgent and warning
        return self.completed + self.on_track + self.warning + self.urgent

    @property
    def compliance_rate(self) -> int:
        if self.total == 0:
            return 0
        return int(_round_half_up(Decimal(100 * self.compliant) / Decimal(self.total), "1"))

    @property
    def average_rating(self) -> float:
        if self.total_feedback == 0:
            return 0.0
        return float(_round_half_up(Decimal(self.rating_sum) / Decimal(self.total_feedback), "0.1"))

    def __add__(self, other: "SLAStats") -> "SLAStats":
        if not isinstance(other, SLAStats):
            return NotImplemented
        return SLAStats(
            total=self.total + other.total,
            completed=self.completed + other.completed,
            overdue=self.overdue + other.overdue,
            urgent=self.urgent + other.urgent,
            warning=self.warning + other.warning,
            on_track=self.on_track + other.on_track,
            rating_sum=self.rating_sum + other.rating_sum,
            total_feedback=self.total_feedback + other.total_feedback,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Dashboard payload with camelCase keys."""
        return {
            "total": self.total,
            "completed": self.completed,
            "overdue": self.overdue,
            "urgent": self.urgent,
            "warning": self.warning,
            "onTrack": self.on_track,
            "complianceRate": self.compliance_rate,
            "averageRating": self.average_rating,
            "totalFeedback": self.total_feedback,
        }


def aggregate(snapshots: Iterable[ComplaintSnapshot], now: datetime) -> SLAStats:
    """
    Aggregate SLA bands and ratings over a batch in a single pass.

    The result does not depend on input order. A malformed due date on
    any open complaint aborts the whole call; no partial stats are returned.

    Args:
        snapshots: Complaint snapshots to evaluate
        now: The instant every snapshot is judged against

    Returns:
        SLAStats for the batch

    Raises:
        InvalidTimestamp: If any open complaint carries a malformed due date
    """
    bands: Counter = Counter()
    total = 0
    rating_sum = 0
    total_feedback = 0

    for snapshot in snapshots:
        total += 1
        bands[classify(snapshot, now)] += 1

        if snapshot.rating is not None:
            total_feedback += 1
            rating_sum += snapshot.rating

    return SLAStats(
        total=total,
        completed=bands[SLABand.COMPLETED],
        overdue=bands[SLABand.OVERDUE],
        urgent=bands[SLABand.URGENT],
        warning=bands[SLABand.WARNING],
        on_track=bands[SLABand.ON_TRACK],
        rating_sum=rating_sum,
        total_feedback=total_feedback,
    )
