"""
Weekly template: the single source of truth for when bootcamp sessions happen.

Built once at startup and handed to the scheduling service. Never mutate or
rebuild it elsewhere.
"""

from dataclasses import dataclass

from bootcamp.domain.local_date import Weekday


@dataclass(frozen=True, slots=True)
class TemplateSlot:
    weekday: Weekday
    hour: int  # 24h local time
    minute: int = 0

    def __post_init__(self):
        if not 0 <= self.hour <= 23:
            raise ValueError(f"hour must be within 0..23, got {self.hour}")
        if not 0 <= self.minute <= 59:
            raise ValueError(f"minute must be within 0..59, got {self.minute}")
        object.__setattr__(self, "weekday", Weekday.parse(self.weekday))

    @property
    def time_of_day(self) -> tuple[int, int]:
        return (self.hour, self.minute)

    def __str__(self) -> str:
        return f"{self.weekday.label} {format_time_24h(self.hour, self.minute)}"


WeeklyTemplate = tuple[TemplateSlot, ...]

BOOTCAMP_SCHEDULES: WeeklyTemplate = (
    # Evening sessions: Mon, Tue, Wed, Thu at 17:00
    TemplateSlot(Weekday.MONDAY, 17, 0),
    TemplateSlot(Weekday.TUESDAY, 17, 0),
    TemplateSlot(Weekday.WEDNESDAY, 17, 0),
    TemplateSlot(Weekday.THURSDAY, 17, 0),
    # Morning session: Tuesday at 07:00
    TemplateSlot(Weekday.TUESDAY, 7, 0),
)


def format_time_24h(hour: int, minute: int) -> str:
    return f"{hour:02d}:{minute:02d}"
