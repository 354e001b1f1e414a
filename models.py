"""Data models for the electricity price reporter"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import List, Optional, Tuple, Union


class InvalidQuotationError(ValueError):
    """Raised when upstream price data violates its integrity rules"""


class Zone(Enum):
    """Swedish market price areas"""
    SE1 = "SE1"
    SE2 = "SE2"
    SE3 = "SE3"
    SE4 = "SE4"

    @classmethod
    def parse(cls, text: str) -> "Zone":
        value = (text or "").strip().upper()
        try:
            return cls(value)
        except ValueError:
            valid = ", ".join(z.value for z in cls)
            raise ValueError(f"Invalid zone '{text}'. Choose one of {valid}") from None


@dataclass(frozen=True)
class PriceQuotation:
    """One priced interval from the price source"""
    interval_start: datetime
    interval_end: datetime
    price_per_kwh: float

    def __post_init__(self):
        if self.interval_start >= self.interval_end:
            raise InvalidQuotationError(
                f"Quotation start {self.interval_start.isoformat()} is not before end {self.interval_end.isoformat()}")

    @property
    def hour(self) -> datetime:
        return self.interval_start.replace(minute=0, second=0, microsecond=0)


@dataclass(frozen=True)
class HourlyPrice:
    """Average price of all quotations starting within one hour"""
    hour_start: datetime
    average_price: float

    @property
    def hour_end(self) -> datetime:
        return self.hour_start + timedelta(hours=1)

    def __repr__(self):
        return f"{self.hour_start:%Y-%m-%d %H}h @ {self.average_price:.4f}"


@dataclass(frozen=True)
class Statistics:
    """Summary of an hourly price series"""
    mean: float
    min_price: float
    min_hour: datetime
    max_price: float
    max_hour: datetime


@dataclass(frozen=True)
class WindowResult:
    """Cheapest contiguous run of hours for a fixed-duration load"""
    start_hour: datetime
    duration_hours: int
    total_cost: float
    hours: Tuple[HourlyPrice, ...]

    @property
    def average_cost(self) -> float:
        return self.total_cost / self.duration_hours

    @property
    def end_hour(self) -> datetime:
        return self.hours[-1].hour_end

    def __repr__(self):
        return (f"Window {self.start_hour:%Y-%m-%d %H:%M} +{self.duration_hours}h "
                f"total={self.total_cost:.4f} avg={self.average_cost:.4f}")


@dataclass(frozen=True)
class NoData:
    """No hourly prices were available"""


@dataclass(frozen=True)
class InsufficientData:
    """Fewer hourly buckets than the requested window duration"""
    available_hours: int
    requested_hours: int


@dataclass(frozen=True)
class InvalidDuration:
    """Requested window duration is not an accepted whole number of hours"""
    requested: object
    allowed: Tuple[int, ...] = ()


@dataclass
class PriceReport:
    """Everything computed for one run"""
    hourly: List[HourlyPrice] = field(default_factory=list)
    statistics: Union[Statistics, NoData, None] = None
    window: Optional[Union[WindowResult, InsufficientData, InvalidDuration]] = None
    dates: List[str] = field(default_factory=list)
