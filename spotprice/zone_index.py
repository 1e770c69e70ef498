# spotprice/zone_index.py
from types import MappingProxyType

AVAILABLE = "available"


class ZoneAvailabilityIndex:
    def build(self, per_region_zone_records, regions=None):
        """
        Map each region to the frozenset of zones currently usable for launches.
        Regions listed in ``regions`` but missing from the source get an empty set.
        """
        index = {region: set() for region in (regions or ())}
        for region, records in per_region_zone_records.items():
            zones = index.setdefault(region, set())
            for record in records:
                if record.state == AVAILABLE and record.zone_name:
                    zones.add(record.zone_name)
        return MappingProxyType({region: frozenset(zones) for region, zones in index.items()})
