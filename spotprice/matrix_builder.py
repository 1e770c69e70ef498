# spotprice/matrix_builder.py
import logging
from decimal import Decimal, InvalidOperation
from types import MappingProxyType

from spotprice.errors import MalformedRecord

log = logging.getLogger(__name__)

REQUIRED_FIELDS = ("region", "instance_type", "availability_zone", "price")


def _parse_price(value):
    if isinstance(value, Decimal):
        price = value
    else:
        try:
            price = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            return None
    if not price.is_finite() or price < 0:
        return None
    return price


def freeze(matrix):
    """Turn nested dicts of lists into read-only mappings of tuples."""
    return MappingProxyType({
        itype: MappingProxyType({zone: tuple(prices) for zone, prices in zones.items()})
        for itype, zones in matrix.items()
    })


class PricingMatrixBuilder:
    """
    Groups raw price history into region -> instance type -> zone -> prices.
    Duplicate prices are kept.
    """

    def build_region(self, region, records):
        grouped = {}
        for record in records:
            for field in REQUIRED_FIELDS:
                if getattr(record, field, None) in (None, ""):
                    raise MalformedRecord(region, field, record)
            if record.region != region:
                raise MalformedRecord(region, "region", record, reason="mismatched")
            price = _parse_price(record.price)
            if price is None:
                raise MalformedRecord(region, "price", record, reason="invalid")

            zones = grouped.setdefault(record.instance_type, {})
            zones.setdefault(record.availability_zone, []).append(price)

        log.debug("Built pricing matrix for %s: %d instance types", region, len(grouped))
        return freeze(grouped)

    def build(self, per_region_records):
        """
        Build the full matrix. Each region is built independently; if any
        region is malformed the whole build fails, and the regions that did
        build are attached to the error as ``intact``.
        """
        matrix = {}
        first_error = None
        for region, records in per_region_records.items():
            try:
                matrix[region] = self.build_region(region, records)
            except MalformedRecord as e:
                log.error("Rejecting pricing data for %s: %s", region, e)
                if first_error is None:
                    first_error = e

        if first_error is not None:
            first_error.intact = MappingProxyType(matrix)
            raise first_error
        return MappingProxyType(matrix)
