# inventory/data/context.py
from dataclasses import dataclass
from pathlib import Path

from inventory.utils.settings import DATA_DIR

DB_SUFFIX = ".sqlite3"


@dataclass(frozen=True)
class StorageContext:
    """Where the storage files of this process live."""

    data_dir: Path

    @classmethod
    def from_settings(cls) -> "StorageContext":
        return cls(Path(DATA_DIR))

    def database_path(self, name: str) -> Path:
        """Absolute path of ``<data_dir>/<name>.sqlite3``; creates the directory."""
        folder = Path(self.data_dir).expanduser().resolve()
        folder.mkdir(parents=True, exist_ok=True)
        return folder / f"{name}{DB_SUFFIX}"
