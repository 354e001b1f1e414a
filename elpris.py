#!/usr/bin/env python3
"""
Electricity spot price reporter

Shows hourly spot prices for a Swedish price area, daily statistics and the
cheapest contiguous block of hours for a fixed-duration load such as EV charging.
"""

import argparse
import asyncio
import logging
import sys
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Callable, List, Optional

import aiohttp

from config import Config
from models import InvalidDuration, InvalidQuotationError, PriceQuotation, PriceReport, Zone
from presenter import USAGE, format_charging_window, format_hourly_table, format_statistics
from price_analyzer import PriceAnalyzer
from price_fetcher import PriceFetcher

logger = logging.getLogger(__name__)

FETCH_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError, InvalidQuotationError)


def setup_logging(log_file: Optional[str] = None, verbose: bool = False) -> None:
    if logging.getLogger().handlers:
        return
    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(asctime)s - %(levelname)s - %(message)s',
        handlers=handlers
    )
    # Suppress noisy loggers
    logging.getLogger('aiohttp').setLevel(logging.WARNING)
    logging.getLogger('asyncio').setLevel(logging.WARNING)


@dataclass
class ReportRequest:
    zone: Zone
    target_date: date
    sorted_desc: bool = False
    charging_hours: Optional[int] = None


def parse_charging(text: str) -> int:
    """Accept '4' as well as '4h'"""
    return int(str(text).strip().lower().removesuffix('h'))


class PriceReporter:
    """Fetches quotations and turns them into a price report"""

    def __init__(self, config: Config, fetcher: Optional[PriceFetcher] = None):
        self.config = config
        self.price_analyzer = PriceAnalyzer()
        self.price_fetcher = fetcher or PriceFetcher(
            base_url=config['api_base_url'], timeout=float(config['request_timeout'])
        )

    def now(self) -> datetime:
        return datetime.now(self.config.tz)

    def should_fetch_tomorrow(self, target_date: date, now: datetime) -> bool:
        """Tomorrow's prices are only published after the cutoff"""
        return target_date == now.date() and now.time() > self.config.tomorrow_cutoff

    async def _fetch_day(self, target_date: date, zone: Zone, required: bool = True) -> Optional[List[PriceQuotation]]:
        try:
            return await self.price_fetcher.fetch_quotations(target_date, zone)
        except FETCH_ERRORS as e:
            if required:
                logger.error(f"Failed to get prices for {target_date} {zone.value}: {e}")
            else:
                logger.warning(f"Failed to get prices for {target_date} {zone.value}, continuing without them: {e}")
            return None

    async def get_quotations(self, target_date: date, zone: Zone,
                             now: Optional[datetime] = None) -> Optional[List[PriceQuotation]]:
        """Quotations for the day, followed by tomorrow's once published"""
        now = now or self.now()
        if not self.should_fetch_tomorrow(target_date, now):
            return await self._fetch_day(target_date, zone)

        today, tomorrow = await asyncio.gather(
            self._fetch_day(target_date, zone),
            self._fetch_day(target_date + timedelta(days=1), zone, required=False)
        )
        if today is None:
            return None
        logger.info(f"Fetched {len(today)} quotations for {target_date} and {len(tomorrow or [])} for the next day")
        return list(today) + list(tomorrow or [])

    def build_report(self, quotations: List[PriceQuotation], charging_hours: Optional[int] = None) -> PriceReport:
        hourly = self.price_analyzer.aggregate_hourly(quotations)
        report = PriceReport(
            hourly=hourly,
            statistics=self.price_analyzer.compute_statistics(hourly),
            dates=sorted({str(q.interval_start.date()) for q in quotations})
        )
        if charging_hours is not None:
            allowed = self.config.allowed_charging_hours
            if charging_hours not in allowed:
                report.window = InvalidDuration(charging_hours, allowed)
            else:
                report.window = self.price_analyzer.optimize_window(hourly, charging_hours)
        return report

    def render(self, report: PriceReport, sorted_desc: bool = False) -> List[str]:
        hourly = self.price_analyzer.sort_by_price_descending(report.hourly) if sorted_desc else report.hourly
        lines = format_hourly_table(hourly)
        lines += format_statistics(report.statistics, report.dates)
        if report.window is not None:
            lines += format_charging_window(report.window)
        return lines

    async def run_once(self, request: ReportRequest, output_fn: Callable[[str], None] = print) -> int:
        """Fetch, compute and print one report. Returns the process exit code."""
        quotations = await self.get_quotations(request.target_date, request.zone)
        if not quotations:
            output_fn("Inga priser hittades.")
            return 1

        report = self.build_report(quotations, request.charging_hours)
        for line in self.render(report, request.sorted_desc):
            output_fn(line)
        return 0


def prompt_request(config: Config, today: date,
                   input_fn: Callable[[], str] = input,
                   output_fn: Callable[[str], None] = print) -> ReportRequest:
    """Ask for zone, date, sort order and charging hours until each answer is valid"""
    while True:
        output_fn(" Välj elområde (SE1, SE2, SE3, SE4):")
        try:
            zone = Zone.parse(input_fn())
            break
        except ValueError:
            output_fn("Ogiltigt elområde. Ange SE1, SE2, SE3 eller SE4.")

    while True:
        output_fn("Ange datum (YYYY-MM-DD), eller lämna tomt för idag:")
        text = input_fn().strip()
        if not text:
            target_date = today
            break
        try:
            target_date = date.fromisoformat(text)
            break
        except ValueError:
            output_fn(f"Ogiltigt datum: {text}")

    output_fn("Vill du sortera priser i fallande ordning? (ja/nej):")
    sorted_desc = input_fn().strip().lower() == 'ja'

    allowed = config.allowed_charging_hours
    choices = ", ".join(str(h) for h in allowed)
    while True:
        output_fn(f"Vill du optimera laddning? Ange antal timmar ({choices}), eller lämna tomt:")
        text = input_fn().strip()
        if not text:
            charging_hours = None
            break
        try:
            charging_hours = parse_charging(text)
        except ValueError:
            charging_hours = None
        if charging_hours in allowed:
            break
        output_fn(f"Ogiltigt antal timmar: {text}")

    return ReportRequest(zone, target_date, sorted_desc, charging_hours)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="elpris",
        description="Electricity spot prices per hour from elprisetjustnu.se, with cheapest charging window"
    )
    parser.add_argument("--zone", help="Price area: SE1, SE2, SE3, SE4")
    parser.add_argument("--date", help="Date in the format YYYY-MM-DD (default: today)")
    parser.add_argument("--sorted", action="store_true", help="List hourly prices in descending order")
    parser.add_argument("--charging", help="Optimize charging for this many hours (2, 4 or 8)")
    parser.add_argument("--interactive", "-i", action="store_true", help="Ask for the options interactively")
    parser.add_argument("--config", default="config.yaml", help="Path to the YAML config file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log debug output to stderr")
    return parser


def request_from_args(args: argparse.Namespace, config: Config, today: date,
                      output_fn: Callable[[str], None] = print) -> Optional[ReportRequest]:
    """Validate command line options; prints the reason and returns None when invalid"""
    if args.zone is None or not args.zone.strip():
        zone = config.zone
        if zone is None:
            output_fn("Missing required option: --zone")
            output_fn("Fel: --zone är obligatorisk (required zone argument)")
            return None
    else:
        try:
            zone = Zone.parse(args.zone)
        except ValueError:
            output_fn(f"Fel: Ogiltig zon '{args.zone}'. Välj mellan SE1, SE2, SE3, SE4. (invalid zone)")
            return None

    try:
        target_date = date.fromisoformat(args.date) if args.date else today
    except ValueError:
        output_fn(f"Ogiltigt datum: {args.date}")
        return None

    charging_hours = None
    if args.charging is not None:
        try:
            charging_hours = parse_charging(args.charging)
        except ValueError:
            output_fn(format_charging_window(InvalidDuration(args.charging, config.allowed_charging_hours))[0])
            return None

    return ReportRequest(zone, target_date, args.sorted, charging_hours)


async def main(argv: Optional[List[str]] = None, output_fn: Callable[[str], None] = print,
               input_fn: Callable[[], str] = input) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = Config(args.config)
    except ValueError as e:
        output_fn(f"Fel: {e}")
        return 1

    setup_logging(config['log_file'], args.verbose)

    if not args.interactive and args.zone is None and args.date is None and args.charging is None \
            and config.zone is None:
        output_fn(USAGE)
        return 0

    reporter = PriceReporter(config)
    today = reporter.now().date()

    if args.interactive:
        try:
            request = prompt_request(config, today, input_fn, output_fn)
        except (EOFError, KeyboardInterrupt):
            logger.info("Interactive input aborted")
            return 1
    else:
        request = request_from_args(args, config, today, output_fn)
        if request is None:
            return 1

    return await reporter.run_once(request, output_fn)


def run() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
