"""Vitals time-series store.

Holds the ordered list of `TimeRecord`s for one anesthesia case. Every
mutation goes through this class so the record-level invariants hold in one
place:

- each record carries all of its fields, so deleting a record can never
  misalign one vital against another;
- `mean` is re-derived after every change to systolic or diastolic;
- two log actions landing on the same `HH:MM` label merge into the last
  record instead of appending a duplicate slot.

Observers registered with `subscribe` are called synchronously after each
mutation that actually changed something. No-op submissions notify nobody.
"""
from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Union

from anesrec.models.app_types import (
    EDITABLE_FIELDS,
    INT_FIELDS,
    TIME_FORMAT,
    TimeRecord,
)

logger = logging.getLogger(__name__)

Number = Union[int, float]
Listener = Callable[["TimeSeriesStore"], None]


class InvalidReadingError(ValueError):
    """Raised when a reading is present but is not a finite number."""


def parse_reading(raw: Any, integer: bool = False) -> Optional[Number]:
    """Parse user input into a number.

    None, empty/blank strings and NaN mean "no reading" and return None.
    Anything else that is not a finite number raises InvalidReadingError.
    Integer fields truncate toward zero, like the monitor's own entry boxes.
    """
    if raw is None:
        return None
    if isinstance(raw, bool):
        raise InvalidReadingError(f"not a number: {raw!r}")
    if isinstance(raw, str):
        text = raw.strip()
        if not text:
            return None
        try:
            value = float(text)
        except (ValueError, OverflowError):
            raise InvalidReadingError(f"not a number: {raw!r}") from None
    elif isinstance(raw, (int, float)):
        try:
            value = float(raw)
        except OverflowError:
            raise InvalidReadingError(f"out of range: {raw!r}") from None
        if math.isnan(value):
            return None
    else:
        try:
            value = float(raw)
        except (TypeError, ValueError, OverflowError):
            raise InvalidReadingError(f"not a number: {raw!r}") from None
        if math.isnan(value):
            return None

    if not math.isfinite(value):
        raise InvalidReadingError(f"not a finite number: {raw!r}")
    if integer:
        return int(value)
    return value


def _check_field(name: str) -> None:
    if name == "mean":
        raise KeyError("mean is derived from systolic/diastolic and cannot be set")
    if name not in EDITABLE_FIELDS:
        raise KeyError(f"unknown vital field: {name!r}")


class TimeSeriesStore:
    def __init__(
        self,
        records: Optional[Iterable[TimeRecord]] = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._records: List[TimeRecord] = []
        self._listeners: List[Listener] = []
        self._clock = clock
        if records is not None:
            self._records = self._adopt(records)

    # -- read access ------------------------------------------------------

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[TimeRecord]:
        return iter(self._records)

    def __getitem__(self, index: int) -> TimeRecord:
        return self._records[index]

    @property
    def records(self) -> tuple:
        return tuple(self._records)

    def column(self, name: str) -> List[Any]:
        """Values of one field across all records, in storage order."""
        return [getattr(r, name) for r in self._records]

    def now_label(self) -> str:
        return self._clock().strftime(TIME_FORMAT)

    # -- observers --------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    # -- mutations --------------------------------------------------------

    def log_vitals(self, **fields: Any) -> bool:
        """Log a vitals reading at the current minute.

        Returns False (and leaves the store untouched) when no field carries a
        usable value.
        """
        values: Dict[str, Number] = {}
        for name, raw in fields.items():
            _check_field(name)
            try:
                value = parse_reading(raw, integer=name in INT_FIELDS)
            except InvalidReadingError as e:
                logger.warning("Ignoring %s on log: %s", name, e)
                continue
            if value is not None:
                values[name] = value

        if not values:
            return False

        label = self.now_label()
        record = self._same_minute_record(label)
        if record is None:
            record = TimeRecord(time=label)
            self._records.append(record)
            logger.debug("New record at %s (index %d)", label, len(self._records) - 1)
        else:
            logger.debug("Merging vitals into record at %s", label)

        for name, value in values.items():
            setattr(record, name, value)
        record.refresh_mean()

        self._notify()
        return True

    def log_fluid_pulse(self, name: str, rate: Any) -> bool:
        channel = (name or "").strip()
        try:
            value = parse_reading(rate)
        except InvalidReadingError as e:
            logger.warning("Ignoring fluid log for %r: %s", channel, e)
            return False
        if not channel or value is None:
            return False

        label = self.now_label()
        record = self._same_minute_record(label)
        if record is None:
            self._records.append(TimeRecord(time=label, fluids={channel: value}))
            logger.debug("New fluid record %s=%s at %s", channel, value, label)
        else:
            if record.fluids is None:
                record.fluids = {}
            record.fluids[channel] = value
            logger.debug("Merging fluid %s=%s into record at %s", channel, value, label)

        self._notify()
        return True

    def edit_field(self, index: int, field: str, raw: Any) -> bool:
        """Set one vital of record `index` from raw input.

        Empty input clears the field. Non-numeric input is rejected and the
        field keeps its value; the call then returns False.
        """
        _check_field(field)
        record = self._record_at(index)
        try:
            value = parse_reading(raw, integer=field in INT_FIELDS)
        except InvalidReadingError as e:
            logger.warning("Rejected edit of %s at %s: %s", field, record.time, e)
            return False

        setattr(record, field, value)
        if field in ("systolic", "diastolic"):
            record.refresh_mean()

        self._notify()
        return True

    def edit_fluid(self, index: int, name: str, raw: Any) -> bool:
        record = self._record_at(index)
        name = (name or "").strip()
        if not name:
            logger.warning("Rejected fluid edit at %s: empty channel name", record.time)
            return False
        try:
            value = parse_reading(raw)
        except InvalidReadingError as e:
            logger.warning("Rejected edit of fluid %s at %s: %s", name, record.time, e)
            return False

        if value is None:
            if not record.fluids or name not in record.fluids:
                return False
            del record.fluids[name]
            if not record.fluids:
                record.fluids = None
        else:
            if record.fluids is None:
                record.fluids = {}
            record.fluids[name] = value

        self._notify()
        return True

    def delete_record(self, index: int) -> TimeRecord:
        self._record_at(index)
        removed = self._records.pop(index)
        logger.info("Deleted record at %s (index %d)", removed.time, index)
        self._notify()
        return removed

    def replace_all(self, records: Iterable[TimeRecord]) -> None:
        self._records = self._adopt(records)
        self._notify()

    def clear(self) -> None:
        self._records = []
        self._notify()

    # -- helpers ----------------------------------------------------------

    def _same_minute_record(self, label: str) -> Optional[TimeRecord]:
        if self._records and self._records[-1].time == label:
            return self._records[-1]
        return None

    def _record_at(self, index: int) -> TimeRecord:
        if not isinstance(index, int) or isinstance(index, bool) or not 0 <= index < len(self._records):
            raise IndexError(f"record index {index!r} out of range (0..{len(self._records) - 1})")
        return self._records[index]

    @staticmethod
    def _adopt(records: Iterable[TimeRecord]) -> List[TimeRecord]:
        adopted = []
        for r in records:
            r = r.copy()
            if not r.fluids:
                r.fluids = None
            r.refresh_mean()
            adopted.append(r)
        return adopted

