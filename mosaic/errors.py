"""Exception hierarchy for the placement engine."""


class MosaicError(Exception):
    """Base class for all mosaic errors."""


class InvalidGeometry(MosaicError, ValueError):
    """A rectangle with non-finite coordinates or a non-positive size."""


class OverlapConflict(MosaicError):
    """A proposed placement overlaps one that is already committed.

    Recoverable: the caller should re-snap against a fresh settled set
    and submit again.
    """

    def __init__(self, conflicting_ids: list[str] | None = None):
        self.conflicting_ids = list(conflicting_ids or [])
        message = "Overlaps an existing tile"
        if self.conflicting_ids:
            message += f" ({', '.join(self.conflicting_ids)})"
        super().__init__(message)


class PlacementNotFound(MosaicError, LookupError):
    """No placement exists with the requested identifier."""

    def __init__(self, placement_id: str):
        self.placement_id = placement_id
        super().__init__(f"Placement not found: {placement_id}")


class NotAuthorized(MosaicError):
    """The caller's credential did not pass the admin check."""


class InvalidImage(MosaicError, ValueError):
    """An uploaded image was empty, too large, or not an image."""
