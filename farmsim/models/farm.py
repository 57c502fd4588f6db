"""FarmState — the mutable aggregate owned by the tick orchestrator."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterator
from dataclasses import dataclass, field

from farmsim.models.enums import EventTypeEnum, SeasonEnum
from farmsim.models.plot import Plot
from farmsim.schemas.events import PendingEvent
from farmsim.schemas.farm import ClimateState, FarmNotice

NOTICE_LOG_SIZE = 20


@dataclass
class CooldownMarkers:
    """Absolute days on which the last drought/heatwave ended and the last frost hit."""

    last_drought_end: int | None = None
    last_heatwave_end: int | None = None
    last_frost_day: int | None = None

    def marker_for(self, event_type: EventTypeEnum) -> int | None:
        match event_type:
            case EventTypeEnum.drought:
                return self.last_drought_end
            case EventTypeEnum.heatwave:
                return self.last_heatwave_end
            case EventTypeEnum.frost:
                return self.last_frost_day
        return None

    def record(self, event_type: EventTypeEnum, day: int) -> None:
        match event_type:
            case EventTypeEnum.drought:
                self.last_drought_end = day
            case EventTypeEnum.heatwave:
                self.last_heatwave_end = day
            case EventTypeEnum.frost:
                self.last_frost_day = day

    def cooling_down(self, event_type: EventTypeEnum, today: int, window: int) -> bool:
        marker = self.marker_for(event_type)
        return marker is not None and today - marker < window


@dataclass
class ResearchDiscount:
    rate: float
    until_day: int


@dataclass
class FarmState:
    grid: list[list[Plot]]
    balance: float
    water_reserve: float
    climate: ClimateState
    farm_health: int
    farm_value: int = 0
    year: int = 1
    day: int = 1
    season: SeasonEnum = SeasonEnum.spring
    season_day: int = 1
    days_per_year: int = 360
    researched: list[str] = field(default_factory=list)
    market_prices: dict[str, float] = field(default_factory=dict)
    pending_events: list[PendingEvent] = field(default_factory=list)
    cooldowns: CooldownMarkers = field(default_factory=CooldownMarkers)
    research_discount: ResearchDiscount | None = None
    notices: deque[FarmNotice] = field(default_factory=lambda: deque(maxlen=NOTICE_LOG_SIZE))

    @property
    def absolute_day(self) -> int:
        return (self.year - 1) * self.days_per_year + self.day

    @property
    def date_label(self) -> str:
        return f"{self.season}, Year {self.year}"

    def notify(self, message: str, is_alert: bool = False) -> FarmNotice:
        """Record a player-facing notice; the newest notice comes first."""
        notice = FarmNotice(date=self.date_label, message=message, is_alert=is_alert)
        self.notices.appendleft(notice)
        return notice

    def plots(self) -> Iterator[tuple[int, int, Plot]]:
        for row_index, row in enumerate(self.grid):
            for col_index, plot in enumerate(row):
                yield row_index, col_index, plot

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < len(self.grid) and 0 <= col < len(self.grid[row])
