"""
Ratekeeper command line entry point.

Commands:
    fetch                     import one provider for one date
    fetch-history             walk providers back N days through the task queue
    warmup-providers-cache    rebuild the provider listing
    sync-provider-currencies  compare fetched currencies with declared ones
    worker                    run the scheduler with the daily dispatch job
"""

import argparse
import asyncio
import logging
import sys
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import date
from typing import AsyncIterator

import httpx
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from ratekeeper import __version__
from ratekeeper.cache import (
    CorrectedDayCache,
    MemoryCache,
    RateCache,
    RateLimitCache,
    TimeseriesCache,
)
from ratekeeper.config import Settings, get_settings
from ratekeeper.database import close_pool, ensure_schema, get_pool
from ratekeeper.importer import ProviderImporter
from ratekeeper.rate_manager import RateManager
from ratekeeper.registry import ProviderRegistry
from ratekeeper.repository import PostgresRateRepository
from ratekeeper.service import RateService
from ratekeeper.worker import Backpressure, FetchRateHandler, FetchRateTask, SchedulerTaskQueue

logger = logging.getLogger(__name__)


def setup_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)]
    )


@dataclass
class Application:
    settings: Settings
    scheduler: AsyncIOScheduler
    registry: ProviderRegistry
    importer: ProviderImporter
    manager: RateManager
    queue: SchedulerTaskQueue
    handler: FetchRateHandler
    backpressure: Backpressure
    service: RateService


@asynccontextmanager
async def open_application(settings: Settings) -> AsyncIterator[Application]:
    """Wire every component on one database pool, one HTTP client and one cache."""
    pool = await get_pool(settings)
    await ensure_schema(pool)
    repository = PostgresRateRepository(pool)
    cache = MemoryCache()
    rate_limits = RateLimitCache(cache)
    corrected_days = CorrectedDayCache(cache)
    scheduler = AsyncIOScheduler(timezone=settings.scheduler_timezone)

    try:
        async with httpx.AsyncClient(follow_redirects=True) as client:
            registry = ProviderRegistry(settings, client, cache, repository)
            importer = ProviderImporter(settings, registry, repository, rate_limits, corrected_days)
            manager = RateManager(
                settings,
                registry,
                repository,
                corrected_days,
                RateCache(cache, ttl=settings.rate_cache_ttl),
                TimeseriesCache(cache, ttl=settings.timeseries_cache_ttl),
            )
            queue = SchedulerTaskQueue(scheduler)
            handler = FetchRateHandler(settings, importer, registry, queue, rate_limits)
            queue.bind(handler.handle)
            backpressure = Backpressure(settings, registry, rate_limits)

            yield Application(
                settings=settings,
                scheduler=scheduler,
                registry=registry,
                importer=importer,
                manager=manager,
                queue=queue,
                handler=handler,
                backpressure=backpressure,
                service=RateService(manager, queue, backpressure),
            )
    finally:
        if scheduler.running:
            scheduler.shutdown(wait=False)
        await close_pool()


def _provider_keys(app: Application, provider: str | None) -> list[str]:
    if provider:
        return [app.registry.get(provider).service_key]
    return [p.service_key for p in app.registry.active_providers()]


# === Commands ===

async def cmd_fetch(app: Application, args: argparse.Namespace) -> None:
    on = args.date or date.today()
    status, found = await app.importer.fetch_and_save_rates(args.provider, on)
    print(f"{args.provider} {on}: {status.value} ({found})")


async def cmd_fetch_history(app: Application, args: argparse.Namespace) -> None:
    today = date.today()
    for key in _provider_keys(app, args.provider):
        task = FetchRateTask(date=today, provider=key, load_previous=args.days)
        app.queue.enqueue(task, delay=app.backpressure.delay(key))
        logger.info(f"Queued {args.days} days of history for {key}")

    app.scheduler.start()
    # A fired job leaves the job store before its coroutine starts; wait for two idle checks
    idle_checks = 0
    while idle_checks < 2:
        await asyncio.sleep(1)
        idle_checks = idle_checks + 1 if app.queue.is_idle() else 0
    logger.info("✅ History import finished")


async def cmd_warmup_providers_cache(app: Application, args: argparse.Namespace) -> None:
    providers = await app.registry.list_all(force_refresh=True)
    for info in providers:
        print(f"{info.key}: base {info.base_currency}, {len(info.currencies)} currencies, since {info.min_date}")


async def cmd_sync_provider_currencies(app: Application, args: argparse.Namespace) -> None:
    for key in _provider_keys(app, args.provider):
        provider = app.registry.get(key)
        try:
            result = await provider.get_rates_by_date(date.today())
        except Exception as e:
            logger.warning(f"⚠️ {key}: fetch failed: {e}")
            continue
        declared = set(provider.available_currencies)
        fetched = set(result.rates)
        print(f"{key} ({result.date}):")
        print(f"  missing: {', '.join(sorted(declared - fetched)) or '-'}")
        print(f"  extra:   {', '.join(sorted(fetched - declared)) or '-'}")


async def dispatch_daily(app: Application) -> None:
    """Queue today's fetch (and yesterday's, for the diff) for every active provider."""
    today = date.today()
    keys = [p.service_key for p in app.registry.active_providers()]
    for key in keys:
        task = FetchRateTask(date=today, provider=key, load_previous=1)
        app.queue.enqueue(task, delay=app.backpressure.delay(key))
    logger.info(f"⏰ Daily dispatch queued {len(keys)} providers for {today}")


async def cmd_worker(app: Application, args: argparse.Namespace) -> None:
    settings = app.settings
    app.scheduler.add_job(
        dispatch_daily,
        CronTrigger(
            hour=settings.scheduler_cron_hour,
            minute=settings.scheduler_cron_minute
        ),
        args=[app],
        id="daily_rate_dispatch",
        name="Daily Rate Dispatch",
        replace_existing=True
    )
    app.scheduler.start()
    logger.info(
        f"⏰ Scheduler started: Daily dispatch at "
        f"{settings.scheduler_cron_hour:02d}:{settings.scheduler_cron_minute:02d} "
        f"{settings.scheduler_timezone}"
    )
    await app.registry.list_all(force_refresh=True)
    await asyncio.Event().wait()


COMMANDS = {
    "fetch": cmd_fetch,
    "fetch-history": cmd_fetch_history,
    "warmup-providers-cache": cmd_warmup_providers_cache,
    "sync-provider-currencies": cmd_sync_provider_currencies,
    "worker": cmd_worker,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ratekeeper", description="Exchange rate aggregator")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    commands = parser.add_subparsers(dest="command", required=True)

    fetch = commands.add_parser("fetch", help="Import rates of one provider for one date")
    fetch.add_argument("--provider", required=True)
    fetch.add_argument("--date", type=date.fromisoformat, default=None)

    history = commands.add_parser("fetch-history", help="Backfill provider history")
    history.add_argument("--days", type=int, default=180)
    history.add_argument("--provider", default=None)

    commands.add_parser("warmup-providers-cache", help="Rebuild the provider listing")

    sync = commands.add_parser("sync-provider-currencies", help="Report currency drift")
    sync.add_argument("--provider", default=None)

    commands.add_parser("worker", help="Run the scheduler")
    return parser


async def run(args: argparse.Namespace, settings: Settings) -> None:
    logger.info(f"🚀 Starting Ratekeeper v.{__version__}: {args.command}")
    async with open_application(settings) as app:
        await COMMANDS[args.command](app, args)


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the ratekeeper command."""
    args = build_parser().parse_args(argv)
    settings = get_settings()
    setup_logging(settings)
    try:
        asyncio.run(run(args, settings))
    except KeyboardInterrupt:
        logger.info("🛑 Interrupted")


if __name__ == "__main__":
    main()
