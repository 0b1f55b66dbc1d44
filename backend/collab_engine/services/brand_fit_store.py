"""
Brand-Fit Persistence

The Brand-Fit form saves as the creator edits. Edits are coalesced by a
debounce timer and written as one whole validated record, so a reader
never sees half of an edit burst.

    store = SqlBrandFitStore()
    form = BrandFitFormController(store, user_id)
    form.set_field("brand_categories", ["Fashion & Apparel"])
    form.set_field("camera_comfort", "on_camera")
    ...                      # one write, ~1s after the last edit
    form.close()             # flushes anything still pending
"""
import logging
import threading
from collections import OrderedDict
from datetime import datetime
from typing import Any, Callable, Dict, Mapping, Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import BRAND_FIT_MAX_IDLE_FORMS, BRAND_FIT_SAVE_DELAY_SECONDS
from ..database import SessionLocal
from ..models.brand_fit import BRAND_FIT_FIELDS, BrandFitProfile, merge_fields, normalize_keys, parse_brand_fit
from ..models.db_models import BrandFitDataDB
from .scoring.completion import calculate_brand_fit_completion

logger = logging.getLogger(__name__)


class BrandFitStoreError(Exception):
    """Raised when a Brand-Fit record cannot be read or written."""
    pass


# =============================================================================
# STORES
# =============================================================================

class BrandFitStore(Protocol):
    def load(self, user_id: str) -> Optional[BrandFitProfile]:
        ...

    def save(self, user_id: str, profile: BrandFitProfile) -> None:
        ...


class InMemoryBrandFitStore:
    """Process-local store, one frozen snapshot per user."""

    def __init__(self, initial: Optional[Mapping[str, Any]] = None):
        self._lock = threading.Lock()
        self._records: Dict[str, BrandFitProfile] = {}
        self.write_count = 0
        for user_id, raw in (initial or {}).items():
            profile = parse_brand_fit(raw)
            if profile is not None:
                self._records[user_id] = profile

    def load(self, user_id: str) -> Optional[BrandFitProfile]:
        with self._lock:
            return self._records.get(user_id)

    def save(self, user_id: str, profile: BrandFitProfile) -> None:
        with self._lock:
            self._records[user_id] = profile
            self.write_count += 1


class SqlBrandFitStore:
    """
    brand_fit_data table, one row per user keyed by user id.

    Rows are overwritten, never deleted. Each call opens its own session
    because debounced writes run on a timer thread.
    """

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal):
        self.session_factory = session_factory

    def load(self, user_id: str) -> Optional[BrandFitProfile]:
        db = self.session_factory()
        try:
            row = db.get(BrandFitDataDB, user_id)
            return parse_brand_fit(row.data) if row else None
        except SQLAlchemyError as e:
            raise BrandFitStoreError(f"Failed to load Brand-Fit for {user_id}: {e}") from e
        finally:
            db.close()

    def save(self, user_id: str, profile: BrandFitProfile) -> None:
        db = self.session_factory()
        try:
            row = db.get(BrandFitDataDB, user_id)
            if row is None:
                db.add(BrandFitDataDB(user_id=user_id, data=profile.to_dict()))
            else:
                row.data = profile.to_dict()
                row.updated_at = datetime.utcnow()
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise BrandFitStoreError(f"Failed to save Brand-Fit for {user_id}: {e}") from e
        finally:
            db.close()


# =============================================================================
# DEBOUNCE
# =============================================================================

class Debouncer:
    """
    Runs `callback` once, `delay` seconds after the last `trigger()`.

    Each trigger cancels the pending timer and starts a new one. A timer
    that already started firing when it was replaced or cancelled sees a
    newer generation and does nothing.
    """

    def __init__(self, delay: float, callback: Callable[[], None]):
        self.delay = delay
        self.callback = callback
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._generation = 0

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._timer is not None

    def trigger(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._generation += 1
            self._timer = threading.Timer(self.delay, self._fire, args=(self._generation,))
            self._timer.daemon = True
            self._timer.start()

    def cancel(self) -> bool:
        """Drop the pending run. Returns True if one was pending."""
        with self._lock:
            self._generation += 1
            if self._timer is None:
                return False
            self._timer.cancel()
            self._timer = None
            return True

    def flush(self) -> None:
        """Run the callback now if a run is pending."""
        if self.cancel():
            self.callback()

    def _fire(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation:
                return
            self._timer = None
        try:
            self.callback()
        except Exception:
            logger.exception("Debounced callback failed")


# =============================================================================
# FORM CONTROLLER
# =============================================================================

class BrandFitFormController:
    """
    Mutable state of one Brand-Fit form.

    Edits land in a pending map (latest value per field wins). When the
    debounce fires, or on `flush()`, the pending fields are merged over the
    stored record and written once under the write lock.
    """

    def __init__(self, store: BrandFitStore, user_id: str, delay: float = BRAND_FIT_SAVE_DELAY_SECONDS):
        self.store = store
        self.user_id = user_id
        self._state_lock = threading.Lock()
        self._write_lock = threading.Lock()
        self._pending: Dict[str, Any] = {}
        self._closed = False
        self._snapshot: Optional[BrandFitProfile] = store.load(user_id)
        self._debouncer = Debouncer(delay, self._write_on_timer)

    def set_field(self, name: str, value: Any) -> None:
        self.update({name: value})

    def update(self, fields: Mapping[str, Any]) -> None:
        """
        Record edits and restart the save timer.

        Raises:
            KeyError: for a field that is not part of the Brand-Fit form
        """
        normalized = normalize_keys(dict(fields))
        unknown = [k for k in normalized if k not in BRAND_FIT_FIELDS]
        if unknown:
            raise KeyError(f"Unknown Brand-Fit field(s): {', '.join(sorted(unknown))}")
        if not normalized:
            return
        with self._state_lock:
            self._pending.update(normalized)
        self._debouncer.trigger()

    def flush(self) -> Optional[BrandFitProfile]:
        """Write pending edits immediately and return the stored snapshot."""
        self._debouncer.cancel()
        self._write_pending()
        return self.snapshot()

    def close(self) -> None:
        with self._state_lock:
            self._closed = True
        self.flush()

    @property
    def has_pending(self) -> bool:
        with self._state_lock:
            return bool(self._pending)

    @property
    def is_idle(self) -> bool:
        """No pending edits, no armed timer and no write in flight."""
        return not self.has_pending and not self._debouncer.pending and not self._write_lock.locked()

    def snapshot(self) -> Optional[BrandFitProfile]:
        """Last record written (or loaded). Never a partial edit."""
        with self._state_lock:
            return self._snapshot

    def draft(self) -> BrandFitProfile:
        """Stored record with pending edits applied, as the form shows it."""
        with self._state_lock:
            return merge_fields(self._snapshot, self._pending)

    def completion_percent(self) -> int:
        return calculate_brand_fit_completion(self.draft())

    def _write_on_timer(self) -> None:
        try:
            self._write_pending()
        except BrandFitStoreError:
            with self._state_lock:
                closed = self._closed
            if not closed:
                # Retry after another quiet period
                self._debouncer.trigger()

    def _write_pending(self) -> None:
        with self._write_lock:
            with self._state_lock:
                if not self._pending:
                    return
                updates = self._pending
                self._pending = {}

            try:
                base = self.store.load(self.user_id)
                profile = merge_fields(base, updates)
                self.store.save(self.user_id, profile)
            except BrandFitStoreError:
                # Put the edits back unless newer ones replaced them
                with self._state_lock:
                    self._pending = {**updates, **self._pending}
                logger.error(f"Brand-Fit save failed for {self.user_id}, {len(updates)} field(s) kept pending")
                raise

            with self._state_lock:
                self._snapshot = profile
            logger.info(f"Saved Brand-Fit for {self.user_id} ({len(updates)} field(s))")


class BrandFitFormRegistry:
    """
    One controller per user, so concurrent edits for a user share a write lock.

    Controllers are kept in least-recently-used order. Once more than
    `max_idle` are held, the oldest idle ones are dropped; a controller
    with unsaved edits is never dropped.
    """

    def __init__(
        self,
        store: BrandFitStore,
        delay: float = BRAND_FIT_SAVE_DELAY_SECONDS,
        max_idle: int = BRAND_FIT_MAX_IDLE_FORMS,
    ):
        self.store = store
        self.delay = delay
        self.max_idle = max_idle
        self._lock = threading.Lock()
        self._controllers: "OrderedDict[str, BrandFitFormController]" = OrderedDict()

    def __len__(self) -> int:
        with self._lock:
            return len(self._controllers)

    def controller(self, user_id: str) -> BrandFitFormController:
        with self._lock:
            form = self._controllers.get(user_id)
            if form is None:
                form = BrandFitFormController(self.store, user_id, self.delay)
                self._controllers[user_id] = form
            self._controllers.move_to_end(user_id)
            self._evict_idle()
            return form

    def _evict_idle(self) -> None:
        excess = len(self._controllers) - self.max_idle
        if excess <= 0:
            return
        # Oldest first, never the controller just handed out
        for user_id in list(self._controllers)[:-1]:
            if excess <= 0:
                break
            if self._controllers[user_id].is_idle:
                del self._controllers[user_id]
                excess -= 1

    def close(self) -> None:
        """Flush every controller. A failed user does not stop the others."""
        with self._lock:
            forms = list(self._controllers.values())
        failed = 0
        for form in forms:
            try:
                form.close()
            except BrandFitStoreError:
                failed += 1
                logger.exception(f"Could not flush Brand-Fit edits for {form.user_id}")
        if failed:
            logger.error(f"{failed} Brand-Fit form(s) closed with unsaved edits")
