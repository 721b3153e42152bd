"""Per-run media directories served under /media."""

import logging
import shutil
import time
from pathlib import Path

from autotube.config import Settings, get_settings

logger = logging.getLogger(__name__)

MEDIA_ROUTE = "/media"


class MediaStore:
    """Stores files produced by local adapters and maps them to public URLs."""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self.base_dir = Path(self.settings.media_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def run_dir(self, run_id: str) -> Path:
        """Return (creating if needed) the directory for a run."""
        run_dir = self.base_dir / run_id
        run_dir.mkdir(parents=True, exist_ok=True)
        return run_dir

    def path_for(self, run_id: str, filename: str) -> Path:
        return self.run_dir(run_id) / filename

    def write_bytes(self, run_id: str, filename: str, data: bytes) -> Path:
        path = self.path_for(run_id, filename)
        path.write_bytes(data)
        logger.debug("Wrote %d bytes to %s", len(data), path)
        return path

    def write_text(self, run_id: str, filename: str, text: str) -> Path:
        path = self.path_for(run_id, filename)
        path.write_text(text, encoding="utf-8")
        return path

    def public_url(self, path: Path) -> str:
        """Map a file inside the media directory to its public URL."""
        relative = Path(path).resolve().relative_to(self.base_dir.resolve())
        base = self.settings.public_base_url.rstrip("/")
        return f"{base}{MEDIA_ROUTE}/{relative.as_posix()}"

    def cleanup_run(self, run_id: str) -> None:
        """Remove every file produced for a run."""
        run_dir = self.base_dir / run_id
        if run_dir.exists():
            shutil.rmtree(run_dir, ignore_errors=True)
            logger.info(f"Cleaned up media for run {run_id}")

    def cleanup_expired(self, ttl_seconds: int | None = None) -> int:
        """Remove run directories last modified more than ttl_seconds ago."""
        ttl = ttl_seconds if ttl_seconds is not None else self.settings.media_ttl_seconds
        if ttl <= 0:
            return 0
        now = time.time()
        cleaned = 0
        for run_dir in self.base_dir.iterdir():
            if run_dir.is_dir() and now - run_dir.stat().st_mtime > ttl:
                shutil.rmtree(run_dir, ignore_errors=True)
                cleaned += 1
        if cleaned:
            logger.info("Removed %d expired run directories from %s", cleaned, self.base_dir)
        return cleaned
