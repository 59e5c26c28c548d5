"""Placement consistency guard.

Client-side snapping is advisory and may be computed against a stale view of
the wall. The guard is the single source of truth: a placement is stored only
if, at the instant of commit, it overlaps no committed placement.
"""

import logging
from typing import Any, Callable, Mapping

from sqlalchemy import text
from sqlalchemy.orm import Session, sessionmaker

from mosaic.db.models import Placement
from mosaic.errors import NotAuthorized, OverlapConflict, PlacementNotFound
from mosaic.events import EngineEvent, EventBus
from mosaic.geometry import DEFAULT_TOLERANCE, Rect, overlaps, parse_rect
from mosaic.placements.locks import RegionLocks
from mosaic.storage import LocalImageStore

logger = logging.getLogger(__name__)

Authorizer = Callable[[str | None], bool]


def _deny_all(credential: str | None) -> bool:
    return False


def validate_rect(rect: Rect | Mapping[str, Any]) -> Rect:
    """Re-validate geometry arriving from outside the guard.

    Raises:
        InvalidGeometry: If the rectangle is malformed.
    """
    values = rect.model_dump() if isinstance(rect, Rect) else dict(rect)
    return parse_rect(values.get("x"), values.get("y"), values.get("w"), values.get("h"))


class PlacementGuard:
    """Atomic check-and-insert of placements, plus privileged deletion."""

    def __init__(
        self,
        session_factory: sessionmaker,
        image_store: LocalImageStore | None = None,
        authorizer: Authorizer = _deny_all,
        tolerance: float = DEFAULT_TOLERANCE,
        region_locks: RegionLocks | None = None,
        events: EventBus | None = None,
    ):
        self.session_factory = session_factory
        self.image_store = image_store
        self.authorizer = authorizer
        self.tolerance = tolerance
        self.region_locks = region_locks or RegionLocks()
        self.events = events

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_placements(self) -> list[Placement]:
        """All committed placements, oldest first."""
        with self.session_factory() as db:
            return db.query(Placement).order_by(Placement.created_at, Placement.id).all()

    def settled_rects(self) -> list[Rect]:
        """The settled set as plain rectangles, for snapping."""
        return [p.rect for p in self.list_placements()]

    def get(self, placement_id: str) -> Placement:
        with self.session_factory() as db:
            placement = db.get(Placement, placement_id)
            if placement is None:
                raise PlacementNotFound(placement_id)
            return placement

    # ------------------------------------------------------------------
    # Commit
    # ------------------------------------------------------------------

    def commit(
        self,
        rect: Rect | Mapping[str, Any],
        image_ref: str,
        caption: str | None = None,
    ) -> Placement:
        """Store a placement if it overlaps nothing already committed.

        The overlap check and the insert happen under the region locks
        covering ``rect`` (and, on PostgreSQL, matching advisory locks), so
        of two mutually overlapping proposals exactly one can succeed.

        Args:
            rect: Proposed geometry, untrusted.
            image_ref: Locator of the already stored image.
            caption: Optional caption.

        Returns:
            The stored placement with its server-assigned id.

        Raises:
            InvalidGeometry: If the geometry is malformed.
            OverlapConflict: If the placement would overlap a committed one.
        """
        rect = validate_rect(rect)

        with self.region_locks.hold(rect) as stripes:
            with self.session_factory() as db:
                self._lock_across_processes(db, stripes)

                conflicts = self._find_conflicts(db, rect)
                if conflicts:
                    db.rollback()
                    conflict_ids = [c.id for c in conflicts]
                    logger.info("Rejected placement %s: overlaps %s", rect, conflict_ids)
                    self._emit(
                        EngineEvent.PLACEMENT_REJECTED,
                        {"rect": rect.model_dump(), "conflicts": conflict_ids},
                    )
                    raise OverlapConflict(conflict_ids)

                placement = Placement(
                    image_ref=image_ref,
                    caption=caption or "",
                    x=rect.x,
                    y=rect.y,
                    w=rect.w,
                    h=rect.h,
                )
                db.add(placement)
                db.commit()
                db.refresh(placement)

        logger.info("Committed placement %s at %s", placement.id, rect)
        self._emit(EngineEvent.PLACEMENT_CREATED, placement.to_dict())
        return placement

    def publish(
        self,
        rect: Rect | Mapping[str, Any],
        filename: str,
        content: bytes,
        content_type: str | None,
        caption: str | None = None,
    ) -> Placement:
        """Store an image and commit its placement.

        If the commit fails for any reason the stored image is removed again.

        Raises:
            InvalidGeometry: If the geometry is malformed (nothing is stored).
            InvalidImage: If the upload is not an acceptable image.
            OverlapConflict: If the placement would overlap a committed one.
        """
        if self.image_store is None:
            raise RuntimeError("PlacementGuard has no image store")

        rect = validate_rect(rect)
        stored = self.image_store.save(filename, content, content_type)
        try:
            return self.commit(rect, stored.url, caption)
        except BaseException:
            self.image_store.delete(stored.name)
            raise

    def _find_conflicts(self, db: Session, rect: Rect) -> list[Placement]:
        """Committed placements overlapping ``rect``."""
        tol = self.tolerance
        candidates = db.query(Placement).filter(
            Placement.x < rect.right - tol,
            Placement.x + Placement.w > rect.x + tol,
            Placement.y < rect.bottom - tol,
            Placement.y + Placement.h > rect.y + tol,
        ).all()
        return [p for p in candidates if overlaps(rect, p.rect, tol)]

    def _lock_across_processes(self, db: Session, stripes: list[int]) -> None:
        """Take transaction-scoped advisory locks where the database has them."""
        if db.get_bind().dialect.name != "postgresql":
            return
        for stripe in stripes:
            db.execute(
                text("SELECT pg_advisory_xact_lock(:key)"),
                {"key": RegionLocks.advisory_key(stripe)},
            )

    # ------------------------------------------------------------------
    # Deletion
    # ------------------------------------------------------------------

    def delete(self, placement_id: str, credential: str | None) -> dict:
        """Remove a placement and free its image.

        Gaps left behind in the wall are not repaired.

        Returns:
            The deleted placement as a dict.

        Raises:
            NotAuthorized: If the credential is refused.
            PlacementNotFound: If no such placement exists.
        """
        self._authorize(credential)

        with self.session_factory() as db:
            placement = db.get(Placement, placement_id)
            if placement is None:
                raise PlacementNotFound(placement_id)
            deleted = placement.to_dict()
            db.delete(placement)
            db.commit()

        self._free_image(deleted["url"])
        logger.info("Deleted placement %s", placement_id)
        self._emit(EngineEvent.PLACEMENT_DELETED, deleted)
        return deleted

    def clear(self, credential: str | None) -> int:
        """Remove every placement and its image.

        Returns:
            Number of placements deleted.
        """
        self._authorize(credential)

        with self.session_factory() as db:
            placements = db.query(Placement).all()
            refs = [p.image_ref for p in placements]
            for placement in placements:
                db.delete(placement)
            db.commit()

        for ref in refs:
            self._free_image(ref)
        logger.info("Cleared %d placements", len(refs))
        self._emit(EngineEvent.MOSAIC_CLEARED, {"deleted": len(refs)})
        return len(refs)

    def _authorize(self, credential: str | None) -> None:
        if not self.authorizer(credential):
            raise NotAuthorized("Admin credential required")

    def _free_image(self, image_ref: str) -> None:
        if self.image_store is None:
            return
        try:
            self.image_store.delete(image_ref)
        except OSError:
            logger.exception("Could not remove image %s", image_ref)

    def _emit(self, event: EngineEvent, data: dict) -> None:
        if self.events is not None:
            self.events.emit(event, data)
