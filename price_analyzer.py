"""Hourly aggregation, statistics and cheapest charging window search"""

import logging
from collections import defaultdict
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence, Union

from models import (HourlyPrice, InsufficientData, InvalidDuration, NoData, PriceQuotation, Statistics,
                    WindowResult)

logger = logging.getLogger(__name__)


class PriceAnalyzer:
    """Derives hourly prices, daily statistics and charging windows from quotations"""

    def aggregate_hourly(self, quotations: Iterable[PriceQuotation]) -> List[HourlyPrice]:
        """Average quotations per hour they start in.

        A quotation that straddles an hour boundary is attributed entirely to
        the hour of its start. Hours without quotations are left out.
        """
        buckets: Dict[datetime, List[float]] = defaultdict(list)
        count = 0
        for quotation in quotations:
            buckets[quotation.hour].append(quotation.price_per_kwh)
            count += 1

        hourly = [HourlyPrice(hour, sum(prices) / len(prices))
                  for hour, prices in sorted(buckets.items()) if prices]

        logger.debug(f"aggregate_hourly quotations={count} hours={len(hourly)}")
        return hourly

    def compute_statistics(self, hourly: Sequence[HourlyPrice]) -> Union[Statistics, NoData]:
        """Mean, min and max of the hourly series. Ties keep the earliest hour."""
        total, count = 0.0, 0
        cheapest: Optional[HourlyPrice] = None
        priciest: Optional[HourlyPrice] = None

        for entry in sorted(hourly, key=lambda h: h.hour_start):
            total += entry.average_price
            count += 1
            if cheapest is None or entry.average_price < cheapest.average_price:
                cheapest = entry
            if priciest is None or entry.average_price > priciest.average_price:
                priciest = entry

        if cheapest is None or priciest is None:
            logger.debug("compute_statistics hours=0 result=no_data")
            return NoData()

        stats = Statistics(
            mean=total / count,
            min_price=cheapest.average_price, min_hour=cheapest.hour_start,
            max_price=priciest.average_price, max_hour=priciest.hour_start
        )
        logger.debug(f"compute_statistics hours={count} mean={stats.mean:.4f} "
                     f"min={stats.min_price:.4f}@{stats.min_hour:%H} max={stats.max_price:.4f}@{stats.max_hour:%H}")
        return stats

    def optimize_window(
            self, hourly: Sequence[HourlyPrice], duration_hours
    ) -> Union[WindowResult, InsufficientData, InvalidDuration]:
        """Find the cheapest run of `duration_hours` consecutive hourly buckets.

        Equal totals keep the earliest start.
        """
        if isinstance(duration_hours, bool) or not isinstance(duration_hours, int) or duration_hours <= 0:
            logger.debug(f"optimize_window duration={duration_hours!r} result=invalid_duration")
            return InvalidDuration(duration_hours)

        series = sorted(hourly, key=lambda h: h.hour_start)
        if len(series) < duration_hours:
            logger.debug(f"optimize_window hours={len(series)} duration={duration_hours} result=insufficient_data")
            return InsufficientData(available_hours=len(series), requested_hours=duration_hours)

        best_start, best_sum = None, None
        for start in range(len(series) - duration_hours + 1):
            window_sum = sum(h.average_price for h in series[start:start + duration_hours])
            if best_sum is None or window_sum < best_sum:
                best_sum, best_start = window_sum, start

        window = tuple(series[best_start:best_start + duration_hours])
        result = WindowResult(
            start_hour=window[0].hour_start, duration_hours=duration_hours,
            total_cost=best_sum, hours=window
        )
        logger.debug(f"optimize_window start={result.start_hour:%Y-%m-%d %H:%M} duration={duration_hours} "
                     f"total={result.total_cost:.4f} avg={result.average_cost:.4f}")
        return result

    @staticmethod
    def sort_by_price_descending(hourly: Iterable[HourlyPrice]) -> List[HourlyPrice]:
        """Most expensive first; equal prices keep chronological order"""
        return sorted(hourly, key=lambda h: (-h.average_price, h.hour_start))
