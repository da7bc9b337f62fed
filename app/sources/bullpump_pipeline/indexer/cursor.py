import logging

log = logging.getLogger(__name__)


class IngestionCursor:
    """Last fully processed ledger version. Only ever moves forward.

    Not persisted on its own: on restart it is re-derived from the newest
    trade row (see BullPumpIndexer.bootstrap).
    """

    def __init__(self, version: int | None = None):
        self.version = version

    @property
    def is_set(self) -> bool:
        return self.version is not None

    @property
    def next_version(self) -> int:
        return 0 if self.version is None else self.version + 1

    def reset(self, version: int) -> None:
        """Bootstrap-only: establish the starting point before the loop runs."""
        self.version = max(0, int(version))

    def advance(self, version: int) -> bool:
        version = int(version)
        if self.version is not None and version < self.version:
            log.warning(f"⚠️  Refusing to move cursor back from {self.version} to {version}")
            return False
        self.version = version
        return True

    def __repr__(self) -> str:
        return f"<IngestionCursor v{self.version}>"
