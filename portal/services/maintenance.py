# portal/services/maintenance.py
"""File-backed maintenance flag.

The flag file's existence means "maintenance enabled"; its JSON body carries
the notice shown to visitors. A sidecar ``<flag>.revision`` file holds a
monotonic counter that every write bumps, so concurrent admins cannot
silently overwrite each other.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from dataclasses import dataclass
from datetime import datetime, timezone

from flask import current_app

from portal.i18n import translate

logger = logging.getLogger(__name__)

_write_lock = threading.Lock()


@dataclass(frozen=True)
class MaintenanceStatus:
    enabled: bool
    message: str | None = None
    estimated_end: str | None = None
    activated_at: str | None = None
    revision: int = 0

    def to_dict(self):
        return {
            "enabled": self.enabled,
            "message": self.message,
            "estimatedEnd": self.estimated_end,
            "activatedAt": self.activated_at,
            "revision": self.revision,
        }


class MaintenanceConflictError(Exception):
    """The caller's view of the maintenance record is stale."""

    def __init__(self, current: MaintenanceStatus, expected: int):
        self.current = current
        self.expected = expected
        super().__init__(f"expected revision {expected}, current is {current.revision}")


class MaintenanceStore:
    def __init__(self, path):
        self.path = os.fspath(path)
        self.revision_path = self.path + ".revision"

    # -- reads -------------------------------------------------------------

    def _read_revision(self) -> int:
        try:
            with open(self.revision_path, encoding="utf-8") as fh:
                return int(fh.read().strip() or 0)
        except FileNotFoundError:
            return 0
        except (OSError, ValueError) as e:
            logger.warning("Unreadable maintenance revision file %s: %s", self.revision_path, e)
            return 0

    def read(self) -> MaintenanceStatus:
        """Current record; anything unreadable counts as disabled."""
        revision = self._read_revision()
        try:
            with open(self.path, encoding="utf-8") as fh:
                data = json.load(fh)
        except FileNotFoundError:
            return MaintenanceStatus(enabled=False, revision=revision)
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable maintenance flag %s: %s", self.path, e)
            return MaintenanceStatus(enabled=False, revision=revision)

        if not isinstance(data, dict):
            logger.warning("Ignoring maintenance flag %s: not a JSON object", self.path)
            return MaintenanceStatus(enabled=False, revision=revision)

        return MaintenanceStatus(
            enabled=True,
            message=data.get("message") or translate("maintenance_default_message"),
            estimated_end=data.get("estimatedEnd"),
            activated_at=data.get("activatedAt"),
            revision=revision,
        )

    # -- writes ------------------------------------------------------------

    def _atomic_write(self, path: str, content: str) -> None:
        directory = os.path.dirname(os.path.abspath(path))
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".tmp-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(content)
            os.replace(tmp_path, path)
        except OSError:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def _check_revision(self, expected_revision) -> int:
        current_revision = self._read_revision()
        if expected_revision is not None and int(expected_revision) != current_revision:
            raise MaintenanceConflictError(self.read(), int(expected_revision))
        return current_revision

    def enable(self, message=None, estimated_end=None, expected_revision=None) -> MaintenanceStatus:
        with _write_lock:
            revision = self._check_revision(expected_revision) + 1
            record = {
                "message": message or translate("maintenance_default_message"),
                "estimatedEnd": estimated_end,
                "activatedAt": datetime.now(timezone.utc).isoformat(),
            }
            self._atomic_write(self.path, json.dumps(record, ensure_ascii=False))
            self._atomic_write(self.revision_path, str(revision))

        logger.info("Maintenance mode enabled (revision %s)", revision)
        return MaintenanceStatus(
            enabled=True,
            message=record["message"],
            estimated_end=estimated_end,
            activated_at=record["activatedAt"],
            revision=revision,
        )

    def disable(self, expected_revision=None) -> MaintenanceStatus:
        with _write_lock:
            revision = self._check_revision(expected_revision) + 1
            try:
                os.remove(self.path)
            except FileNotFoundError:
                pass
            self._atomic_write(self.revision_path, str(revision))

        logger.info("Maintenance mode disabled (revision %s)", revision)
        return MaintenanceStatus(enabled=False, revision=revision)


def get_store() -> MaintenanceStore:
    return MaintenanceStore(current_app.config["MAINTENANCE_FILE"])
