"""Exceptions raised by the region statistics aggregator."""


class RealmError(Exception):
    """Base class for py-realm errors."""


class RegionNotFoundError(RealmError, KeyError):
    """Raised when a recompute is requested for an id that is not a known region."""

    def __init__(self, region_id: str, reason: str = "unknown region"):
        self.region_id = region_id
        self.reason = reason
        super().__init__(f"{reason}: {region_id!r}")

    def __str__(self) -> str:
        return f"{self.reason}: {self.region_id!r}"
