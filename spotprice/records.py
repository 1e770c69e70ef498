# spotprice/records.py
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any


@dataclass(frozen=True)
class PriceHistoryRecord:
    region: str | None
    instance_type: str | None
    availability_zone: str | None
    price: Decimal | str | None
    timestamp: datetime | None = None

    @classmethod
    def from_api(cls, region, item: dict[str, Any]):
        """
        Wrap one SpotPriceHistory item as returned by boto3.
        No validation happens here, the matrix builder owns that.
        """
        return cls(
            region=region,
            instance_type=item.get("InstanceType"),
            availability_zone=item.get("AvailabilityZone"),
            price=item.get("SpotPrice"),
            timestamp=item.get("Timestamp"),
        )


@dataclass(frozen=True)
class AvailabilityZoneRecord:
    region: str
    zone_name: str | None
    state: str | None

    @classmethod
    def from_api(cls, region, item: dict[str, Any]):
        # Older API responses only carried ZoneState
        return cls(
            region=region,
            zone_name=item.get("ZoneName"),
            state=item.get("State") or item.get("ZoneState"),
        )
