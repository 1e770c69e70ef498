# spotprice/errors.py
from dataclasses import dataclass


class PricingError(RuntimeError):
    """Base class for failures that abort a pricing fetch cycle."""


class MalformedRecord(PricingError):
    def __init__(self, region, field, record=None, intact=None, reason="missing"):
        self.region = region
        self.field = field
        self.reason = reason
        self.record = record
        # Matrices of the regions that built cleanly before/after the failure
        self.intact = intact or {}
        super().__init__(f"Malformed price record in region {region}: {reason} {field} ({record!r})")


class SourceTimeout(PricingError):
    def __init__(self, timeout, pending=()):
        self.timeout = timeout
        self.pending = tuple(pending)
        super().__init__(
            f"Pricing source did not respond within {timeout}s (pending: {', '.join(self.pending) or 'none'})"
        )


class SourceUnavailable(PricingError):
    def __init__(self, region, operation, detail=None):
        self.region = region
        self.operation = operation
        msg = f"Pricing source call {operation} failed for region {region}"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


@dataclass(frozen=True)
class EmptyRegion:
    """
    Diagnostic, not an error: a region (or one type/zone triple inside it)
    contributes nothing usable to the max-price table.
    """
    region: str
    reason: str
    instance_type: str | None = None
    zone: str | None = None

    def __str__(self):
        if self.zone:
            return (
                f"{self.region}: dropped {self.instance_type} in {self.zone} ({self.reason})"
            )
        return f"{self.region}: {self.reason}"
