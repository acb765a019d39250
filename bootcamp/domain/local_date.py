"""
Calendar date value type with weekday arithmetic.

All dates are civil dates in the deployment's reference timezone, not UTC.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime, timedelta, tzinfo
from enum import IntEnum

from bootcamp.domain.errors import InvalidDateError, InvalidWeekdayError

Clock = Callable[[], datetime]


class Weekday(IntEnum):
    """ISO weekday numbering, Monday=1 .. Sunday=7."""

    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6
    SUNDAY = 7

    @classmethod
    def parse(cls, value: "str | int | Weekday") -> "Weekday":
        """
        Parse a weekday from its English name, three-letter abbreviation
        or ISO number.

        Raises:
            InvalidWeekdayError: If the value names no weekday
        """
        if isinstance(value, int):
            try:
                return cls(value)
            except ValueError as e:
                raise InvalidWeekdayError(str(value)) from e

        text = (value or "").strip().lower()
        if text.isdigit():
            return cls.parse(int(text))
        for weekday in cls:
            name = weekday.name.lower()
            if text == name or (len(text) >= 3 and name.startswith(text)):
                return weekday
        raise InvalidWeekdayError(value)

    @property
    def label(self) -> str:
        return self.name.capitalize()


@dataclass(frozen=True, order=True, slots=True)
class LocalDate:
    """An immutable (year, month, day) triple in the proleptic Gregorian calendar."""

    year: int
    month: int
    day: int

    def __post_init__(self):
        # Raises ValueError for impossible dates such as 2025-02-30
        date(self.year, self.month, self.day)

    @classmethod
    def of(cls, value: date) -> "LocalDate":
        return cls(value.year, value.month, value.day)

    @classmethod
    def from_datetime(cls, value: datetime, tz: tzinfo | None = None) -> "LocalDate":
        """
        Civil date of an instant. Aware datetimes are converted into ``tz``
        first; naive ones are taken as already local.
        """
        if value.tzinfo is not None and tz is not None:
            value = value.astimezone(tz)
        return cls.of(value.date())

    @classmethod
    def today(cls, tz: tzinfo | None = None, clock: Clock | None = None) -> "LocalDate":
        """
        Current date in the reference timezone.

        Args:
            tz: Reference timezone (defaults to the configured one)
            clock: Optional override returning "now", used for deterministic tests
        """
        if tz is None:
            from bootcamp.config import settings

            tz = settings.tzinfo()
        now = clock() if clock else datetime.now(tz)
        return cls.from_datetime(now, tz)

    @classmethod
    def parse(cls, value: str) -> "LocalDate":
        """Parse an ISO ``YYYY-MM-DD`` string."""
        try:
            return cls.of(date.fromisoformat(value.strip()))
        except (AttributeError, ValueError) as e:
            raise InvalidDateError(value) from e

    def to_date(self) -> date:
        return date(self.year, self.month, self.day)

    def weekday(self) -> Weekday:
        return Weekday(self.to_date().isoweekday())

    def plus_days(self, days: int) -> "LocalDate":
        return LocalDate.of(self.to_date() + timedelta(days=days))

    def tomorrow(self) -> "LocalDate":
        return self.plus_days(1)

    def days_until_next(self, weekday: Weekday | int) -> int:
        """Days until the next ``weekday`` on or after this date, in [0, 6]."""
        return (int(weekday) - int(self.weekday())) % 7

    def next_occurrence(self, weekday: Weekday | int) -> "LocalDate":
        return self.plus_days(self.days_until_next(weekday))

    def in_month(self, year: int, month: int) -> bool:
        return self.year == year and self.month == month

    def equals(self, other: "LocalDate") -> bool:
        return self == other

    def to_iso(self) -> str:
        return self.to_date().isoformat()

    def to_human(self) -> str:
        """Short rendering such as ``Tue 3 Jun``."""
        d = self.to_date()
        return f"{d:%a} {d.day} {d:%b}"

    def __str__(self) -> str:
        return self.to_iso()


def parse_date_reference(text: str | None, today: LocalDate) -> LocalDate:
    """
    Resolve a user-supplied date reference relative to ``today``.

    Accepts ``today``, ``tomorrow``, a weekday name (its next occurrence on
    or after today) or an ISO date.

    Raises:
        InvalidDateError: If the text cannot be resolved
    """
    value = (text or "").strip().lower()
    if value in ("", "today"):
        return today
    if value == "tomorrow":
        return today.tomorrow()
    try:
        return today.next_occurrence(Weekday.parse(value))
    except InvalidWeekdayError:
        pass
    return LocalDate.parse(value)
