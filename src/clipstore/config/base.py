# region Docstring
"""
clipstore.config.base
Where clipstore runs and where it keeps its data.
- APP_ENV comes from ENVIRONMENT, or from the working directory: /app is
    docker, /srv is prod, anything else is dev.
- DATA_DIR holds clipstore.db, images/ and preferences.json. CLIPSTORE_DATA_DIR
    overrides it; otherwise /data (docker), /srv/clipstore/data (prod) or
    .cache/clipstore under the working directory (dev).
- All three constants are resolved once, at import time.
"""
# endregion
# region Imports
import os
from pathlib import Path
from typing import Literal

# endregion
# region AppEnv Class


class AppEnv:
    """Environment and data directory detection."""

    ROOT: Path = Path().cwd().resolve()
    PROD: Literal["prod"] = "prod"
    DOCKER: Literal["docker"] = "docker"
    DEV: Literal["dev"] = "dev"

    _DATA_DIRS = {
        DOCKER: Path("/data"),
        PROD: Path("/srv/clipstore/data"),
    }

    @classmethod
    def environment(cls) -> Literal["prod", "docker", "dev"]:
        declared = os.getenv("ENVIRONMENT")
        if declared in (cls.PROD, cls.DOCKER, cls.DEV):
            return declared

        cwd = Path.cwd().as_posix()
        if cwd.startswith("/app"):
            return cls.DOCKER
        if cwd.startswith("/srv"):
            return cls.PROD
        return cls.DEV

    @classmethod
    def app_root(cls) -> Path:
        return cls.ROOT

    @classmethod
    def data_dir(cls) -> Path:
        """Directory for the database, image blobs and preferences."""
        override = os.getenv("CLIPSTORE_DATA_DIR")
        if override:
            return Path(override).expanduser().resolve()
        default = cls._DATA_DIRS.get(cls.environment(), cls.ROOT / ".cache" / "clipstore")
        return default.resolve()


# endregion
# region Module-level Constants

APP_ROOT: Path = AppEnv.app_root()
"""[Path] Root directory of the application."""
APP_ENV: Literal["prod", "docker", "dev"] = AppEnv.environment()
"""[Literal] Environment type."""
DATA_DIR: Path = AppEnv.data_dir()
"""[Path] Directory holding the database, image blobs and preferences."""
# endregion


__all__ = [
    "APP_ENV",
    "APP_ROOT",
    "DATA_DIR",
    "AppEnv",
]
