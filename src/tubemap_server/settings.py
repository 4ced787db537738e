import os
import tempfile
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path


@dataclass(frozen=True)
class Settings:
    vg_path: str
    mounted_data_dir: Path
    internal_data_dir: Path
    workspace_root: Path
    default_context: int = 20
    request_timeout: float = 300.0
    static_dir: Path | None = None
    log_level: str = "INFO"

    def data_dir(self, use_mounted_path: bool) -> Path:
        return self.mounted_data_dir if use_mounted_path else self.internal_data_dir


def load_settings() -> Settings:
    static_dir = os.getenv("TUBEMAP_STATIC_DIR", "public")
    return Settings(
        vg_path=os.getenv("TUBEMAP_VG_PATH", "./vg/vg"),
        mounted_data_dir=Path(os.getenv("TUBEMAP_MOUNTED_DATA_DIR", "./mountedData/")),
        internal_data_dir=Path(os.getenv("TUBEMAP_INTERNAL_DATA_DIR", "./internalData/")),
        workspace_root=Path(os.getenv("TUBEMAP_WORKSPACE_ROOT", tempfile.gettempdir())),
        default_context=int(os.getenv("TUBEMAP_DEFAULT_CONTEXT", "20")),
        request_timeout=float(os.getenv("TUBEMAP_REQUEST_TIMEOUT", "300")),
        static_dir=Path(static_dir) if static_dir else None,
        log_level=os.getenv("TUBEMAP_LOG_LEVEL", "INFO"),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return process-wide settings, read from the environment on first call."""
    return load_settings()
