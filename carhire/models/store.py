import atexit
import copy
import logging
import os
import pickle
import threading
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone

from carhire.config import Config
from carhire.exceptions import DataStoreError, InvalidInputError
from carhire.utils.security import generate_hash

logger = logging.getLogger(__name__)

TABLES = (
    "profiles",
    "user_roles",
    "vehicles",
    "locations",
    "reservations",
    "discounts",
    "feedback",
    "violations",
)

# Tables whose rows carry an updated_at column
TIMESTAMPED = {"profiles", "vehicles", "reservations"}


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


class Store:
    """
    Table-scoped data store: select / get / insert / update / delete / count.

    Rows are plain dicts keyed by id; callers map them to typed records.
    Every mutation is persisted to a pickle file. `transaction()` groups
    several reads and writes under the store lock and persists once,
    restoring the previous tables if anything inside fails.
    """

    _inst = None
    _inst_lock = threading.Lock()
    _atexit_registered = False

    def __init__(self, path: str | os.PathLike | None = None, default_admin: tuple[str, str] | None = None):
        self.path = str(path or Config.DATA_PATH)
        self._tables: dict[str, dict[str, dict]] = {name: {} for name in TABLES}
        self._rw = threading.RLock()
        self._depth = 0
        self._dirty = False

        logger.info("[Store] Using file: %s", self.path)
        self._load()

        # Default admin account, created only when no profile exists yet
        if default_admin and not self._tables["profiles"]:
            username, password = default_admin
            with self.transaction():
                profile = self.insert("profiles", {
                    "username": username,
                    "full_name": "Administrator",
                    "phone": None,
                    "password_hash": generate_hash(password),
                })
                self.insert("user_roles", {"user_id": profile["id"], "role": "admin"})

        # Automatically save on exit (skipped in test environments)
        if not Store._atexit_registered and os.getenv("APP_ENV") != "test":
            atexit.register(self.save)
            Store._atexit_registered = True

    # ---------- Singleton ----------
    @classmethod
    def instance(cls, path: str | os.PathLike | None = None, default_admin: tuple[str, str] | None = None):
        """Return the global singleton instance of Store."""
        with cls._inst_lock:
            if cls._inst is None:
                cls._inst = Store(path, default_admin=default_admin)
        return cls._inst

    @classmethod
    def reset_instance(cls):
        """Forget the singleton so the next instance() call builds a fresh store."""
        with cls._inst_lock:
            cls._inst = None

    # ---------- Persistence ----------
    def _load(self):
        """Load tables from the pickle file, or start empty if unavailable or invalid."""
        if not os.path.exists(self.path):
            return
        try:
            with open(self.path, "rb") as f:
                data = pickle.load(f)
        except (OSError, pickle.UnpicklingError, EOFError) as e:
            logger.warning("[Store] Load failed (%s); starting empty.", e)
            return

        if isinstance(data, dict) and set(data) <= set(TABLES):
            for name in TABLES:
                self._tables[name] = data.get(name) or {}
            logger.info(
                "[Store] Loaded: %s",
                ", ".join(f"{name}={len(rows)}" for name, rows in self._tables.items()),
            )
        else:
            # Incompatible data format: back up the old file and start empty
            bak = self.path + ".bak"
            try:
                os.replace(self.path, bak)
                logger.warning("[Store] Incompatible store (%s); backed up to %s. Starting empty.",
                               type(data).__name__, bak)
            except OSError as e:
                logger.error("[Store] Backup failed: %s", e)

    def _dump(self):
        """Write the in-memory tables to the pickle file safely (atomic replace)."""
        os.makedirs(os.path.dirname(os.path.abspath(self.path)), exist_ok=True)
        tmp = self.path + ".tmp"
        with open(tmp, "wb") as f:
            pickle.dump(self._tables, f, protocol=pickle.HIGHEST_PROTOCOL)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, self.path)

    def save(self):
        """Thread-safe save method."""
        with self._rw:
            logger.info("[Store] Saving to %s ...", self.path)
            self._dump()

    @contextmanager
    def transaction(self):
        """
        Hold the store lock for the whole block and persist once at the end.
        On an exception, or if the final write fails, the tables are restored
        to what they were when the outermost transaction began.
        """
        with self._rw:
            outer = self._depth == 0
            snapshot = copy.deepcopy(self._tables) if outer else None
            if outer:
                self._dirty = False
            self._depth += 1
            try:
                yield self
            except Exception:
                if outer:
                    self._tables = snapshot
                raise
            finally:
                self._depth -= 1
            if outer and self._dirty:
                try:
                    self._dump()
                except (OSError, pickle.PicklingError) as e:
                    self._tables = snapshot
                    logger.error("[Store] Write failed, changes rolled back: %s", e)
                    raise DataStoreError(f"Failed to save changes: {e}") from e

    # ---------- Table operations ----------
    def _table(self, name: str) -> dict[str, dict]:
        if name not in self._tables:
            raise InvalidInputError(f"Unknown table '{name}'")
        return self._tables[name]

    def select(self, table: str, where: dict | None = None, order_by: str | None = None,
               descending: bool = False) -> list[dict]:
        """Return copies of the rows matching every equality filter in `where`."""
        with self._rw:
            rows = [dict(r) for r in self._table(table).values()
                    if all(r.get(k) == v for k, v in (where or {}).items())]
        if order_by:
            present = [r for r in rows if r.get(order_by) is not None]
            missing = [r for r in rows if r.get(order_by) is None]
            present.sort(key=lambda r: r[order_by], reverse=descending)
            # rows without the column always sort last
            rows = present + missing
        return rows

    def get(self, table: str, row_id) -> dict | None:
        """Return a copy of one row by id."""
        with self._rw:
            row = self._table(table).get(str(row_id))
            return dict(row) if row is not None else None

    def count(self, table: str, where: dict | None = None) -> int:
        return len(self.select(table, where))

    def insert(self, table: str, row: dict) -> dict:
        """Insert a row, assigning id and timestamps; return the stored copy."""
        with self.transaction():
            rows = self._table(table)
            rid = str(uuid.uuid4())
            stored = dict(row)
            stored["id"] = rid
            stored.setdefault("created_at", _now_iso())
            if table in TIMESTAMPED:
                stored["updated_at"] = stored["created_at"]
            rows[rid] = stored
            self._dirty = True
            return dict(stored)

    def update(self, table: str, row_id, changes: dict) -> dict | None:
        """Apply `changes` to one row; return the updated copy or None if missing."""
        with self.transaction():
            row = self._table(table).get(str(row_id))
            if row is None:
                return None
            row.update({k: v for k, v in changes.items() if k not in ("id", "created_at")})
            self._dirty = True
            if table in TIMESTAMPED:
                row["updated_at"] = _now_iso()
            return dict(row)

    def delete(self, table: str, row_id) -> bool:
        """Delete one row by id."""
        with self.transaction():
            rows = self._table(table)
            if str(row_id) in rows:
                del rows[str(row_id)]
                self._dirty = True
                return True
            return False

    def clear(self):
        """Drop every row of every table."""
        with self.transaction():
            for rows in self._tables.values():
                rows.clear()
            self._dirty = True
