import dataclasses
import unittest
from decimal import Decimal
from spotprice.errors import EmptyRegion
from spotprice.matrix_builder import PricingMatrixBuilder
from spotprice.records import AvailabilityZoneRecord, PriceHistoryRecord
from spotprice.snapshot import PricingSnapshot
from spotprice.zone_index import ZoneAvailabilityIndex


class TestPricingSnapshot(unittest.TestCase):
    def setUp(self):
        matrix = PricingMatrixBuilder().build({
            "us-east-1": [
                PriceHistoryRecord("us-east-1", "m3.medium", "us-east-1a", "0.10"),
                PriceHistoryRecord("us-east-1", "m3.medium", "us-east-1a", "0.15"),
                PriceHistoryRecord("us-east-1", "m3.medium", "us-east-1c", "0.40"),
            ],
            "eu-west-1": [],
        })
        zones = ZoneAvailabilityIndex().build(
            {"us-east-1": [
                AvailabilityZoneRecord("us-east-1", "us-east-1a", "available"),
                AvailabilityZoneRecord("us-east-1", "us-east-1b", "available"),
            ]},
            regions=["us-east-1", "eu-west-1"],
        )
        self.snapshot = PricingSnapshot.build(["us-east-1", "eu-west-1"], matrix, zones, lookback_minutes=30)

    def test_accessors(self):
        """Test typed accessors per region/type/zone"""
        s = self.snapshot
        self.assertEqual(s.regions, frozenset({"us-east-1", "eu-west-1"}))
        self.assertEqual(s.instance_types("us-east-1"), frozenset({"m3.medium"}))
        self.assertEqual(s.zones_for("us-east-1", "m3.medium"), frozenset({"us-east-1a", "us-east-1c"}))
        self.assertEqual(s.prices("us-east-1", "m3.medium", "us-east-1a"), (Decimal("0.10"), Decimal("0.15")))
        self.assertEqual(s.prices("us-east-1", "c5.large", "us-east-1a"), ())
        self.assertEqual(s.available_zones_in_region("us-east-1"), frozenset({"us-east-1a", "us-east-1b"}))
        self.assertEqual(s.available_zones_in_region("ap-south-1"), frozenset())
        self.assertEqual(s.available_zones()["eu-west-1"], frozenset())

    def test_max_price_lookup(self):
        s = self.snapshot
        self.assertEqual(s.max_price("us-east-1", "m3.medium", "us-east-1a"), Decimal("0.15"))
        # priced but not available
        self.assertIsNone(s.max_price("us-east-1", "m3.medium", "us-east-1c"))
        # available but not priced
        self.assertIsNone(s.max_price("us-east-1", "m3.medium", "us-east-1b"))

    def test_empty_region_diagnostics(self):
        """Test regions with no zones or no pricing surface as EmptyRegion diagnostics"""
        reasons = {(d.region, d.reason) for d in self.snapshot.diagnostics}
        self.assertIn(("eu-west-1", "no available zones"), reasons)
        self.assertIn(("eu-west-1", "no pricing data"), reasons)
        self.assertTrue(all(isinstance(d, EmptyRegion) for d in self.snapshot.diagnostics))

    def test_immutable(self):
        with self.assertRaises(dataclasses.FrozenInstanceError):
            self.snapshot.regions = frozenset()
        with self.assertRaises(TypeError):
            self.snapshot.matrix["ap-south-1"] = {}
        with self.assertRaises(TypeError):
            self.snapshot.zone_index["us-east-1"] = frozenset()

    def test_hashable(self):
        """Test snapshots can be hashed despite holding read-only mappings"""
        self.assertEqual(hash(self.snapshot), hash(self.snapshot))
        seen = {self.snapshot: "cycle-1"}
        self.assertEqual(seen[self.snapshot], "cycle-1")

    def test_max_prices_not_cached(self):
        first = self.snapshot.max_prices()
        first["us-east-1"].clear()
        self.assertEqual(self.snapshot.max_prices()["us-east-1"]["m3.medium"]["us-east-1a"], Decimal("0.15"))


if __name__ == '__main__':
    unittest.main()
