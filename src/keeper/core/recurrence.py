"""Pure recurrence scheduling logic - no I/O dependencies."""

import calendar
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum, IntEnum

SUNDAY = 6  # date.weekday() value

# Upper bound on month rolling; every ordinal we support occurs in every month.
MAX_MONTHS_AHEAD = 24


class InvalidRecurrenceError(ValueError):
    """Raised when a recurrence rule is constructed with inconsistent fields."""

    pass


class RecurrenceError(Exception):
    """Raised when a rule cannot be advanced."""

    pass


class RecurrenceKind(Enum):
    """Supported recurrence patterns."""

    ONE_TIME = "one-time"
    WEEKLY_SUNDAY = "weekly-sunday"
    MONTHLY_NTH_SUNDAY = "monthly-nth-sunday"


class SundayOrdinal(IntEnum):
    """Which Sunday of the month a monthly rule lands on."""

    FIRST = 1
    SECOND = 2
    THIRD = 3

    @property
    def label(self) -> str:
        return self.name.lower()

    @classmethod
    def from_label(cls, label: str) -> "SundayOrdinal":
        try:
            return cls[label.strip().upper()]
        except KeyError:
            raise InvalidRecurrenceError(f"Unknown Sunday ordinal: {label!r}") from None


@dataclass(frozen=True)
class RecurrenceRule:
    """
    How a task repeats.

    A tagged variant: `ordinal` is set if and only if `kind` is
    MONTHLY_NTH_SUNDAY. Use the classmethod constructors rather than
    building one by hand.
    """

    kind: RecurrenceKind
    ordinal: SundayOrdinal | None = None

    def __post_init__(self):
        if self.kind is RecurrenceKind.MONTHLY_NTH_SUNDAY:
            if self.ordinal is None:
                raise InvalidRecurrenceError("Monthly Nth-Sunday rule requires an ordinal")
            if not isinstance(self.ordinal, SundayOrdinal):
                try:
                    object.__setattr__(self, "ordinal", SundayOrdinal(self.ordinal))
                except ValueError:
                    raise InvalidRecurrenceError(
                        f"Sunday ordinal must be 1, 2 or 3, got {self.ordinal!r}"
                    ) from None
        elif self.ordinal is not None:
            raise InvalidRecurrenceError(f"{self.kind.value} rule does not take an ordinal")

    @classmethod
    def one_time(cls) -> "RecurrenceRule":
        return cls(RecurrenceKind.ONE_TIME)

    @classmethod
    def weekly_sunday(cls) -> "RecurrenceRule":
        return cls(RecurrenceKind.WEEKLY_SUNDAY)

    @classmethod
    def monthly_nth_sunday(cls, ordinal: SundayOrdinal | int) -> "RecurrenceRule":
        return cls(RecurrenceKind.MONTHLY_NTH_SUNDAY, ordinal)

    @property
    def is_recurring(self) -> bool:
        return self.kind is not RecurrenceKind.ONE_TIME

    def describe(self) -> str:
        """Human-readable label."""
        match self.kind:
            case RecurrenceKind.ONE_TIME:
                return "One-time"
            case RecurrenceKind.WEEKLY_SUNDAY:
                return "Every Sunday"
            case RecurrenceKind.MONTHLY_NTH_SUNDAY:
                return f"{self.ordinal.label.capitalize()} Sunday of the month"

    def to_dict(self) -> dict:
        data = {"type": self.kind.value}
        if self.ordinal is not None:
            data["ordinal"] = self.ordinal.label
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "RecurrenceRule":
        """Create a rule from its stored `{type, ordinal?}` record."""
        try:
            kind = RecurrenceKind(data["type"])
        except (KeyError, ValueError):
            raise InvalidRecurrenceError(f"Unknown recurrence type in {data!r}") from None
        ordinal = data.get("ordinal")
        if ordinal is not None:
            ordinal = SundayOrdinal.from_label(ordinal)
        return cls(kind, ordinal)


def locate_nth_sunday(year: int, month: int, ordinal: int) -> date | None:
    """
    Find the Nth Sunday of a month.

    Returns None when the month has fewer than `ordinal` Sundays.
    """
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be in 1..12, got {month}")

    _, days_in_month = calendar.monthrange(year, month)
    count = 0
    for day in range(1, days_in_month + 1):
        candidate = date(year, month, day)
        if candidate.weekday() == SUNDAY:
            count += 1
            if count == ordinal:
                return candidate
    return None


def next_sunday_on_or_after(day: date) -> date:
    """The given day if it is a Sunday, otherwise the following Sunday."""
    return day + timedelta(days=(SUNDAY - day.weekday()) % 7)


def next_sunday_strictly_after(day: date) -> date:
    """The first Sunday later than the given day."""
    return next_sunday_on_or_after(day + timedelta(days=1))


def _next_month(year: int, month: int) -> tuple[int, int]:
    if month == 12:
        return year + 1, 1
    return year, month + 1


def next_due_date(rule: RecurrenceRule, reference: date | None, today: date) -> date:
    """
    Compute the next due date for a recurring rule.

    Pure function - no I/O.

    Args:
        rule: A recurring rule (one-time rules are rejected)
        reference: The occurrence being rescheduled, or None for a new task
        today: The caller's notion of the current day, captured once per pass

    Returns:
        A date on or after `today`, and strictly after `reference` when given
    """
    match rule.kind:
        case RecurrenceKind.ONE_TIME:
            raise RecurrenceError("One-time tasks have no next occurrence")

        case RecurrenceKind.WEEKLY_SUNDAY:
            if reference is not None:
                candidate = next_sunday_strictly_after(reference)
            else:
                candidate = next_sunday_on_or_after(today)
            while candidate < today:
                candidate += timedelta(weeks=1)
            return candidate

        case RecurrenceKind.MONTHLY_NTH_SUNDAY:
            # Months before today's cannot yield a candidate >= today.
            anchor = max(reference, today) if reference is not None else today
            year, month = anchor.year, anchor.month
            for _ in range(MAX_MONTHS_AHEAD):
                candidate = locate_nth_sunday(year, month, rule.ordinal)
                if (
                    candidate is not None
                    and candidate >= today
                    and (reference is None or candidate > reference)
                ):
                    return candidate
                year, month = _next_month(year, month)
            raise RecurrenceError(
                f"No {rule.describe().lower()} within {MAX_MONTHS_AHEAD} months of {anchor}"
            )

    raise RecurrenceError(f"Unsupported recurrence kind: {rule.kind!r}")


def upcoming_occurrences(rule: RecurrenceRule, today: date, count: int = 5) -> list[date]:
    """List the next `count` occurrences of a recurring rule, starting from today."""
    occurrences = []
    reference = None
    for _ in range(count):
        reference = next_due_date(rule, reference, today)
        occurrences.append(reference)
    return occurrences
