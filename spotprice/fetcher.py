# spotprice/fetcher.py
import logging
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from datetime import datetime, timedelta, timezone

from spotprice.errors import PricingError, SourceTimeout, SourceUnavailable
from spotprice.matrix_builder import PricingMatrixBuilder
from spotprice.snapshot import PricingSnapshot
from spotprice.zone_index import ZoneAvailabilityIndex

log = logging.getLogger(__name__)

DEFAULT_LOOKBACK_MINUTES = 30
MIN_WORKERS = 2


class PricingFetcher:
    """
    Runs price-history and zone-availability queries on two separate pools,
    so a query of one kind never waits in the queue behind the other kind.

    Reuse one fetcher across cycles: a query abandoned on timeout keeps its
    pool thread until the source call returns, and reusing the pools bounds
    how many such threads can exist.
    """

    def __init__(self, max_workers=8):
        if max_workers < MIN_WORKERS:
            raise ValueError(f"max_workers must be at least {MIN_WORKERS}, got {max_workers}")
        lane_width = max_workers // 2
        self.max_workers = max_workers
        self.price_pool = ThreadPoolExecutor(max_workers=lane_width, thread_name_prefix="spot-price")
        self.zone_pool = ThreadPoolExecutor(max_workers=lane_width, thread_name_prefix="spot-zones")

    def close(self):
        self.price_pool.shutdown(wait=False, cancel_futures=True)
        self.zone_pool.shutdown(wait=False, cancel_futures=True)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def fetch(self, source, lookback_minutes=DEFAULT_LOOKBACK_MINUTES, timeout=None, regions=None, now=None):
        """
        Query price history and zone availability for every region concurrently,
        join with an overall timeout, then build an immutable PricingSnapshot.

        Any failure aborts the whole fetch: no partial snapshot is ever returned
        and nothing is retried here. Retry belongs to the caller's cycle loop.
        """
        if lookback_minutes <= 0:
            raise ValueError(f"lookback_minutes must be positive, got {lookback_minutes}")

        regions = list(regions if regions is not None else source.regions)
        now = now or datetime.now(timezone.utc)
        start_time = now - timedelta(minutes=lookback_minutes)

        futures = {}
        try:
            for region in regions:
                futures[self.price_pool.submit(source.price_history, region, start_time)] = (region, "price_history")
                futures[self.zone_pool.submit(source.availability_zones, region)] = (region, "availability_zones")
            log.info("Fetching spot pricing for %d regions since %s", len(regions), start_time.isoformat())

            done, pending = wait(futures, timeout=timeout, return_when=FIRST_EXCEPTION)

            for future in done:
                exc = future.exception()
                if exc is None:
                    continue
                region, operation = futures[future]
                if isinstance(exc, PricingError):
                    raise exc
                raise SourceUnavailable(region, operation, exc) from exc

            if pending:
                labels = sorted(f"{futures[f][1]}:{futures[f][0]}" for f in pending)
                raise SourceTimeout(timeout, labels)
        finally:
            # Drop queued work from this cycle; running calls cannot be interrupted
            for future in futures:
                future.cancel()

        price_records = {}
        zone_records = {}
        for future, (region, operation) in futures.items():
            if operation == "price_history":
                price_records[region] = future.result()
            else:
                zone_records[region] = future.result()

        matrix = PricingMatrixBuilder().build(price_records)
        zone_index = ZoneAvailabilityIndex().build(zone_records, regions=regions)

        snapshot = PricingSnapshot.build(
            regions,
            matrix,
            zone_index,
            fetched_at=now,
            lookback_minutes=lookback_minutes,
        )
        for diagnostic in snapshot.diagnostics:
            log.warning("Pricing diagnostic: %s", diagnostic)
        return snapshot


def fetch(source, lookback_minutes=DEFAULT_LOOKBACK_MINUTES, timeout=None, regions=None, now=None, max_workers=8):
    """One-shot fetch on a throwaway PricingFetcher."""
    with PricingFetcher(max_workers=max_workers) as fetcher:
        return fetcher.fetch(source, lookback_minutes=lookback_minutes, timeout=timeout, regions=regions, now=now)
