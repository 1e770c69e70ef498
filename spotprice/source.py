# spotprice/source.py
import logging
from threading import Lock

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from spotprice.errors import SourceUnavailable
from spotprice.records import AvailabilityZoneRecord, PriceHistoryRecord

log = logging.getLogger(__name__)


class Ec2PriceHistorySource:
    """
    Spot price history and zone availability read from the EC2 API.

    One client per region, created on first use. Fetch threads share the
    source, so the client cache is lock-guarded.
    """

    def __init__(
        self,
        regions,
        product_description: str = "Linux/UNIX",
        session=None,
        client_factory=None,
        call_timeout: float = 60,
    ):
        self.regions = list(regions)
        self.product_description = product_description
        self.session = session or boto3.Session()
        # Bounded socket timeouts end calls abandoned by a fetch timeout; no retries here
        self.client_config = Config(
            connect_timeout=min(call_timeout, 10),
            read_timeout=call_timeout,
            retries={"total_max_attempts": 1},
        )
        self.client_factory = client_factory or self._default_client
        self._clients = {}
        self.lock = Lock()

    def _default_client(self, region):
        return self.session.client("ec2", region_name=region, config=self.client_config)

    def client(self, region):
        with self.lock:
            if region not in self._clients:
                self._clients[region] = self.client_factory(region)
            return self._clients[region]

    def price_history(self, region, start_time):
        ec2 = self.client(region)
        records = []
        try:
            paginator = ec2.get_paginator("describe_spot_price_history")
            for page in paginator.paginate(
                StartTime=start_time,
                Filters=[{"Name": "product-description", "Values": [self.product_description]}],
            ):
                for item in page.get("SpotPriceHistory", []):
                    records.append(PriceHistoryRecord.from_api(region, item))
        except (ClientError, BotoCoreError) as e:
            raise SourceUnavailable(region, "describe_spot_price_history", e) from e

        log.debug("Fetched %d price points for %s since %s", len(records), region, start_time.isoformat())
        return records

    def availability_zones(self, region):
        ec2 = self.client(region)
        try:
            resp = ec2.describe_availability_zones(
                Filters=[{"Name": "state", "Values": ["available"]}],
            )
        except (ClientError, BotoCoreError) as e:
            raise SourceUnavailable(region, "describe_availability_zones", e) from e

        records = [AvailabilityZoneRecord.from_api(region, item) for item in resp.get("AvailabilityZones", [])]
        log.debug("Fetched %d availability zones for %s", len(records), region)
        return records
