"""Backup archive creation for the server data directory."""
import tarfile
from datetime import datetime
from pathlib import Path
from typing import Optional

from craftctl.core.errors import ArchiveFailed
from craftctl.core.logger import get_logger

logger = get_logger(__name__)

BACKUP_PREFIX = "minecraft-backup"
BACKUP_SUFFIX = ".tar.gz"


def backup_filename(now: Optional[datetime] = None) -> str:
    """Return minecraft-backup-<YYYYMMDD-HHMMSS>.tar.gz for the given time."""
    now = now or datetime.now()
    return f"{BACKUP_PREFIX}-{now.strftime('%Y%m%d-%H%M%S')}{BACKUP_SUFFIX}"


class TarArchiver:
    """Writes gzip-compressed tarballs of a directory."""

    def archive(self, source_dir: Path, dest_path: Path) -> Path:
        """Archive source_dir into dest_path.

        Members are stored under the source directory's own name
        (e.g. data/world/level.dat). A partially written archive is removed
        when archiving fails.

        Returns:
            Path to the written archive
        """
        source_dir = Path(source_dir)
        dest_path = Path(dest_path)
        dest_path.parent.mkdir(parents=True, exist_ok=True)

        logger.info(f"Archiving {source_dir} -> {dest_path}")
        try:
            with tarfile.open(dest_path, "w:gz") as tar:
                tar.add(source_dir, arcname=source_dir.name)
        except (OSError, tarfile.TarError) as e:
            dest_path.unlink(missing_ok=True)
            raise ArchiveFailed(f"Failed to archive {source_dir}: {e}") from e

        logger.info(f"✓ Archive written: {dest_path}")
        return dest_path

