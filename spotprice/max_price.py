# spotprice/max_price.py
import logging

from spotprice.errors import EmptyRegion

log = logging.getLogger(__name__)


class MaxPriceCalculator:
    """
    Reduce the pricing matrix to one ceiling per (region, type, zone).

    The aggregate is the maximum observed price in the lookback window, never
    the mean or the latest value. Triples whose zone is not currently available
    are left out.
    """

    def compute_max_prices(self, snapshot, diagnostics=None):
        table = {}
        for region in sorted(snapshot.regions):
            zones = snapshot.zone_index.get(region, frozenset())
            region_table = {}
            for itype, zone_prices in snapshot.matrix.get(region, {}).items():
                for zone, prices in zone_prices.items():
                    if zone not in zones:
                        self._note(diagnostics, EmptyRegion(
                            region=region,
                            reason="pricing data for a zone that is not currently available",
                            instance_type=itype,
                            zone=zone,
                        ))
                        continue
                    region_table.setdefault(itype, {})[zone] = max(prices)

            if not region_table:
                self._note(diagnostics, EmptyRegion(region, "no launchable pricing in region"))
            table[region] = region_table
        return table

    @staticmethod
    def _note(diagnostics, diagnostic):
        log.warning("Pricing diagnostic: %s", diagnostic)
        if diagnostics is not None:
            diagnostics.append(diagnostic)


def compute_max_prices(snapshot, diagnostics=None):
    return MaxPriceCalculator().compute_max_prices(snapshot, diagnostics)
