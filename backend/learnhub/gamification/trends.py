"""
Trend delta calculator.

Compares the dashboard metrics a user sees now against the snapshot saved on
their previous view and reports the rounded percentage change per metric.
After every computation the current metrics become the new baseline.

Trends are cosmetic: any failure to read or write the baseline degrades to
"no trend" and never fails the caller.
"""

import json
import math
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from numbers import Real
from pathlib import Path
from typing import Any, Mapping

from learnhub.core.logging import get_logger
from learnhub.gamification.constants import SNAPSHOT_STORAGE_KEY, TREND_LABEL

logger = get_logger(__name__)

Snapshot = dict[str, float]


@dataclass(frozen=True)
class TrendDelta:
    """Signed whole-number percentage change of one metric."""

    percent_change: int
    label: str = TREND_LABEL


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # int beyond float range
        return False


def calculate_trend(current: float, previous: float | None) -> TrendDelta | None:
    """
    Percentage change from `previous` to `current`.

    Returns None when there is no baseline, when both values are zero, or
    when the rounded change is smaller than one percent. Any move away from
    a zero baseline is reported as +100. Non-finite operands and ratios too
    large for a float also give None.
    """
    if previous is None or not _is_number(current) or not _is_number(previous):
        return None

    if previous == 0:
        if current == 0:
            return None
        return TrendDelta(percent_change=100)

    try:
        # Multiply first so exact halves stay exact; ties round to even (0.5 -> 0)
        ratio = 100 * (current - previous) / previous
    except OverflowError:
        return None
    if not math.isfinite(ratio):
        return None
    percent = round(ratio)
    if abs(percent) < 1:
        return None
    return TrendDelta(percent_change=percent)


class SnapshotStore(ABC):
    """Storage for the one baseline snapshot of a single owner."""

    @abstractmethod
    def load(self) -> Any:
        """
        Return the stored snapshot, or None when there is none.

        The value is untrusted: callers must cope with any shape.
        """

    @abstractmethod
    def save(self, snapshot: Snapshot) -> None:
        """Overwrite the stored snapshot."""


class InMemorySnapshotStore(SnapshotStore):
    """Process-local store."""

    def __init__(self, initial: Any = None):
        self._value = initial
        self._lock = threading.Lock()

    def load(self) -> Any:
        with self._lock:
            return dict(self._value) if isinstance(self._value, dict) else self._value

    def save(self, snapshot: Snapshot) -> None:
        with self._lock:
            self._value = dict(snapshot)


class JsonFileSnapshotStore(SnapshotStore):
    """
    Baseline kept in a local JSON document under a fixed key.

    The document may hold other keys; they are preserved on save.
    """

    def __init__(self, path: str | Path, key: str = SNAPSHOT_STORAGE_KEY):
        self.path = Path(path)
        self.key = key

    def _read_document(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        document = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(document, dict):
            raise ValueError(f"Snapshot file {self.path} does not hold a JSON object")
        return document

    def load(self) -> Any:
        return self._read_document().get(self.key)

    def save(self, snapshot: Snapshot) -> None:
        try:
            document = self._read_document()
        except ValueError:
            # Corrupt file: start a fresh document
            document = {}
        document[self.key] = dict(snapshot)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(document), encoding="utf-8")
        tmp_path.replace(self.path)


def coerce_snapshot(raw: Any) -> Snapshot | None:
    """
    Interpret a stored value as a flat {metric: number} mapping.

    Accepts a mapping or its JSON text. Non-numeric entries are dropped;
    anything else yields None.
    """
    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except ValueError:
            return None
    if not isinstance(raw, Mapping):
        return None
    return {str(name): value for name, value in raw.items() if _is_number(value)}


def diff_snapshots(
    current: Mapping[str, float], previous: Mapping[str, float] | None
) -> dict[str, TrendDelta | None]:
    """Trend per metric of `current`; metrics missing from `previous` get None."""
    previous = previous or {}
    return {name: calculate_trend(value, previous.get(name)) for name, value in current.items()}


def compute_trends(
    current: Mapping[str, float], store: SnapshotStore
) -> dict[str, TrendDelta | None]:
    """
    Diff `current` against the stored baseline, then make it the new baseline.

    Args:
        current: Flat metric mapping shown to the user now
        store: Baseline storage for this user

    Returns:
        Trend (or None) for every metric in `current`
    """
    try:
        previous = coerce_snapshot(store.load())
    except Exception as e:
        logger.warning(
            "Failed to load trend baseline, treating as absent",
            extra={"store": type(store).__name__, "error": str(e)},
        )
        previous = None

    trends = diff_snapshots(current, previous)

    snapshot = {name: value for name, value in current.items() if _is_number(value)}
    try:
        store.save(snapshot)
    except Exception as e:
        logger.warning(
            "Failed to save trend baseline",
            extra={"store": type(store).__name__, "error": str(e)},
        )

    return trends
