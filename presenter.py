"""Console formatting of price reports"""

from datetime import timedelta
from typing import Iterable, List, Sequence, Union

from models import HourlyPrice, InsufficientData, InvalidDuration, NoData, Statistics, WindowResult

USAGE = "Usage: elpris --zone=<SE1-SE4> [--date=YYYY-MM-DD] [--sorted] [--charging=2|4|8]"


def _comma(value: float, decimals: int) -> str:
    return f"{value:.{decimals}f}".replace('.', ',')


def format_hourly_table(hourly: Iterable[HourlyPrice]) -> List[str]:
    lines = ["", "Elpriser per timme:"]
    for entry in hourly:
        lines.append(f"{entry.hour_start:%H}-{entry.hour_end:%H} {_comma(entry.average_price * 100, 2)} öre")
    return lines


def format_statistics(outcome: Union[Statistics, NoData], dates: Sequence[str]) -> List[str]:
    if isinstance(outcome, NoData):
        return ["Ingen giltig prisdata hittades"]

    min_end = outcome.min_hour + timedelta(hours=1)
    return [
        "",
        f"Prisstatistik för: {', '.join(dates)}",
        f"Medelpris: {outcome.mean:.4f} SEK/kWh",
        f"Lägsta pris: {outcome.min_price:.4f} SEK/kWh kl {outcome.min_hour:%H}-{min_end:%H}",
        f"Högsta pris: {outcome.max_price:.4f} SEK/kWh kl {outcome.max_hour:%Y-%m-%d} kl {outcome.max_hour:%H:%M}",
    ]


def format_charging_window(outcome: Union[WindowResult, InsufficientData, InvalidDuration]) -> List[str]:
    if isinstance(outcome, InvalidDuration):
        allowed = outcome.allowed or (2, 4, 8)
        choices = ", ".join(str(h) for h in allowed[:-1])
        choices = f"{choices} eller {allowed[-1]}" if choices else str(allowed[-1])
        return [f"Ogiltigt värde för --charging. Välj {choices}."]
    if isinstance(outcome, InsufficientData):
        return [f"Påbörja laddning: För få timpriser tillgängliga för att optimera laddning "
                f"({outcome.requested_hours}h)."]

    lines = ["Påbörja laddning under följande timmar:"]
    for entry in outcome.hours:
        lines.append(f"kl {entry.hour_start:%H}:00 → {_comma(entry.average_price, 4)} SEK/kWh")
    lines.append(f"Totalt: {outcome.total_cost * 100:.2f} öre")
    lines.append(f"Medelpris för fönster: {_comma(outcome.average_cost * 100, 2)} öre")
    return lines
