# spotprice/main.py
import argparse
import json
import logging
import logging.config
import sys
import time
import yaml

from spotprice.config_loader import load_runtime_config
from spotprice.errors import PricingError
from spotprice.fetcher import PricingFetcher
from spotprice.source import Ec2PriceHistorySource


def load_logging_config(path="config/logging.yaml"):
    try:
        with open(path) as f:
            cfg = yaml.safe_load(f)
        logging.config.dictConfig(cfg)
    except (OSError, yaml.YAMLError, ValueError, TypeError):
        logging.basicConfig(
            level=logging.INFO,
            format='{"time":"%(asctime)s","level":"%(levelname)s","name":"%(name)s","msg":"%(message)s"}',
        )


def render_table(table, instance_type=None):
    """Max-price table as JSON-friendly dicts, prices kept exact as strings."""
    out = {}
    for region, types in table.items():
        out[region] = {
            itype: {zone: str(price) for zone, price in sorted(zones.items())}
            for itype, zones in sorted(types.items())
            if instance_type is None or itype == instance_type
        }
    return out


def run_cycle(fetcher, source, args, log):
    snapshot = fetcher.fetch(
        source,
        lookback_minutes=args.lookback_minutes,
        timeout=args.timeout,
    )
    table = snapshot.max_prices()
    log.info(
        "Snapshot ready | regions=%d diagnostics=%d",
        len(snapshot.regions),
        len(snapshot.diagnostics),
    )
    json.dump(render_table(table, args.instance_type), sys.stdout, indent=2, sort_keys=True)
    sys.stdout.write("\n")
    sys.stdout.flush()


def main(argv=None):
    cfg = load_runtime_config()

    parser = argparse.ArgumentParser(description="Fetch spot pricing and print max observed price per region/type/zone.")
    parser.add_argument("--regions", help="Comma-separated regions to poll; if omitted uses runtime config regions")
    parser.add_argument("--lookback-minutes", type=int, default=cfg["lookback_minutes"], help="Price history window in minutes")
    parser.add_argument("--timeout", type=float, default=cfg["fetch_timeout_seconds"], help="Overall fetch timeout in seconds")
    parser.add_argument("--max-workers", type=int, default=cfg["fetch_max_workers"], help="Concurrent source queries")
    parser.add_argument("--instance-type", help="Only print this instance type")
    parser.add_argument("--product-description", default=cfg["product_description"], help="Spot product description filter")
    parser.add_argument("--watch", action="store_true", help="Keep fetching every --interval seconds")
    parser.add_argument("--interval", type=int, default=60, help="Poll interval seconds in watch mode (default 60)")
    parser.add_argument("--logging-config", default="config/logging.yaml", help="Logging dictConfig YAML")
    args = parser.parse_args(argv)

    load_logging_config(args.logging_config)
    log = logging.getLogger("spotprice.main")

    if args.regions:
        regions = [r.strip() for r in args.regions.split(",") if r.strip()]
    else:
        regions = cfg["regions"]
    if not regions:
        raise SystemExit("No regions provided (pass --regions or set regions in config/runtime.yaml)")
    if args.lookback_minutes <= 0:
        raise SystemExit("--lookback-minutes must be positive")
    if args.max_workers < 2:
        raise SystemExit("--max-workers must be at least 2")

    source = Ec2PriceHistorySource(
        regions,
        product_description=args.product_description,
        call_timeout=args.timeout,
    )

    with PricingFetcher(max_workers=args.max_workers) as fetcher:
        if not args.watch:
            run_cycle(fetcher, source, args, log)
            return
        watch(fetcher, source, args, log, regions)


def watch(fetcher, source, args, log, regions):
    log.info("Starting pricing loop | regions=%s interval=%ss lookback=%sm", ",".join(regions), args.interval, args.lookback_minutes)
    while True:
        try:
            run_cycle(fetcher, source, args, log)
        except PricingError as e:
            log.error("Pricing cycle failed, skipping: %s", e)
        time.sleep(args.interval)


if __name__ == "__main__":
    main()
