from pathlib import Path
from hirevision.config import settings


def ensure_data_dirs(data_dir: Path | None = None) -> Path:
    path = data_dir or settings.data_dir
    path.mkdir(parents=True, exist_ok=True)
    (path / "storage").mkdir(exist_ok=True)
    return path


def sanitize_filename(name: str) -> str:
    keep = set("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789._-")
    cleaned = "".join(c if c in keep else "_" for c in name)
    # No segment may resolve to the parent directory.
    return cleaned.lstrip(".") or "file"


def storage_key(*parts: str) -> str:
    return "/".join(sanitize_filename(p) for p in parts)
