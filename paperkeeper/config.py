"""Configuration management.

``Settings`` is a **metaclass-based singleton**: the first call to
``Settings.load()`` creates the instance; every later call returns
the same object.  Use ``update()`` to change values at runtime, or
``reload()`` to re-read everything from disk.

All user-editable configuration lives in ``.metadata/settings.yaml``:

* ``db_path``         – SQLite store file (relative to the project root)
* ``schema_version``  – schema version the engine migrates and validates to
* ``log_level``       – logging level name for the CLI

On first run, missing files are copied from ``.metadata.example/``.
"""

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import yaml

from paperkeeper.models.schema import CURRENT_SCHEMA_VERSION

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Singleton metaclass
# ---------------------------------------------------------------------------

class _SettingsMeta(type):
    """Metaclass that enforces a process-wide singleton for *Settings*.

    * First ``Settings(...)`` creates and caches the instance.
    * Later ``Settings(...)`` calls return the cached instance (args ignored).
    """

    _instances: dict[type, Any] = {}

    def __call__(cls, *args: Any, **kwargs: Any) -> Any:
        if cls not in cls._instances:
            cls._instances[cls] = super().__call__(*args, **kwargs)
        return cls._instances[cls]


# ---------------------------------------------------------------------------
# Settings dataclass (singleton)
# ---------------------------------------------------------------------------

@dataclass
class Settings(metaclass=_SettingsMeta):
    """Application settings: a singleton with runtime-mutable values.

    Usage::

        settings = Settings.load()          # first call → create
        settings = Settings.load()          # later → same object
        settings.update(db_path=Path(...))  # runtime change
        settings = Settings.reload()        # re-read from disk
    """

    db_path: Path = Path("papers.db")
    metadata_dir: Path = Path(".metadata")
    schema_version: str = CURRENT_SCHEMA_VERSION
    log_level: str = "INFO"

    # ── Runtime helpers ───────────────────────────────────────────────

    def update(self, **kwargs: Any) -> None:
        """Mutate settings fields at runtime.

        >>> Settings.load().update(db_path=Path("/tmp/test.db"))
        """
        for key, value in kwargs.items():
            if not hasattr(self, key):
                raise AttributeError(f"Settings has no field '{key}'")
            setattr(self, key, value)

    # ── Factory / lifecycle ───────────────────────────────────────────

    @classmethod
    def load(cls, base_dir: Optional[Path] = None) -> "Settings":
        """Load or return the singleton Settings instance.

        On first call the singleton is created; subsequent calls return
        the cached instance.  Pass *base_dir* to override the project
        root (defaults to the repository root one level above ``paperkeeper/``).
        """
        if cls in _SettingsMeta._instances:
            return _SettingsMeta._instances[cls]  # type: ignore[return-value]

        if base_dir is None:
            base_dir = Path(__file__).resolve().parent.parent

        metadata_dir = base_dir / ".metadata"
        cls._ensure_default_files(base_dir, metadata_dir)

        data = _load_settings(metadata_dir / "settings.yaml")

        return cls(
            db_path=base_dir / str(data.get("db_path") or "papers.db"),
            metadata_dir=metadata_dir,
            schema_version=str(data.get("schema_version") or CURRENT_SCHEMA_VERSION),
            log_level=str(data.get("log_level") or "INFO").upper(),
        )

    @classmethod
    def reload(cls, base_dir: Optional[Path] = None) -> "Settings":
        """Discard the current singleton and re-load from disk."""
        cls.reset()
        return cls.load(base_dir)

    @classmethod
    def reset(cls) -> None:
        """Discard the singleton so the next ``load()`` re-creates it."""
        _SettingsMeta._instances.pop(cls, None)

    # ── Private ───────────────────────────────────────────────────────

    @staticmethod
    def _ensure_default_files(base_dir: Path, metadata_dir: Path) -> None:
        """Copy ``.metadata.example/`` templates when real files are missing."""
        metadata_dir.mkdir(parents=True, exist_ok=True)

        example_dir = base_dir / ".metadata.example"
        if not example_dir.exists():
            return

        for example_file in example_dir.iterdir():
            if example_file.is_file():
                target = metadata_dir / example_file.name
                if not target.exists():
                    shutil.copy2(example_file, target)
                    logger.info("Created .metadata/%s from template", example_file.name)


# ---------------------------------------------------------------------------
# YAML loaders
# ---------------------------------------------------------------------------

def _load_settings(path: Path) -> dict[str, Any]:
    """Load ``settings.yaml``; unreadable or malformed files yield defaults."""
    if not path.exists():
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as exc:
        logger.warning("Ignoring %s: %s", path, exc)
        return {}
    if not isinstance(data, dict):
        return {}
    return data
