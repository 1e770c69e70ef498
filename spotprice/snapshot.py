# spotprice/snapshot.py
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Mapping

from spotprice.errors import EmptyRegion
from spotprice.max_price import MaxPriceCalculator


@dataclass(frozen=True)
class PricingSnapshot:
    """
    Immutable pricing view for one provisioning cycle.

    Built once by ``spotprice.fetcher.fetch`` and discarded after the cycle;
    snapshots are never merged. The max-price table is derived on every call
    to ``max_prices()`` and is not cached.
    """
    regions: frozenset
    # Read-only mappings are unhashable; equality still compares them
    matrix: Mapping = field(hash=False)
    zone_index: Mapping = field(hash=False)
    diagnostics: tuple = ()
    fetched_at: datetime | None = None
    lookback_minutes: int | None = None
    _calculator: MaxPriceCalculator = field(default_factory=MaxPriceCalculator, repr=False, compare=False)

    @classmethod
    def build(cls, regions, matrix, zone_index, **kwargs):
        regions = frozenset(regions)
        diagnostics = []
        for region in sorted(regions):
            if not zone_index.get(region):
                diagnostics.append(EmptyRegion(region, "no available zones"))
            if not matrix.get(region):
                diagnostics.append(EmptyRegion(region, "no pricing data"))
        return cls(
            regions=regions,
            matrix=MappingProxyType(dict(matrix)),
            zone_index=MappingProxyType(dict(zone_index)),
            diagnostics=tuple(diagnostics),
            **kwargs,
        )

    def max_prices(self, diagnostics=None):
        return self._calculator.compute_max_prices(self, diagnostics)

    def max_price(self, region, instance_type, zone):
        if zone not in self.available_zones_in_region(region):
            return None
        prices = self.prices(region, instance_type, zone)
        return max(prices) if prices else None

    def available_zones(self):
        return self.zone_index

    def available_zones_in_region(self, region):
        return self.zone_index.get(region, frozenset())

    def instance_types(self, region):
        return frozenset(self.matrix.get(region, {}))

    def zones_for(self, region, instance_type):
        return frozenset(self.matrix.get(region, {}).get(instance_type, {}))

    def prices(self, region, instance_type, zone):
        return self.matrix.get(region, {}).get(instance_type, {}).get(zone, ())
