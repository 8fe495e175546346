"""Temporary file manager for media delivery."""
import glob
import os
import shutil
import tempfile
import time
import logging
from typing import Optional, Set

logger = logging.getLogger(__name__)

TEMP_PREFIX = "mediabot_"

# Global set to track active TempManager instances
active_temp_managers: Set['TempManager'] = set()


class TempManager:
    """Manages a temporary directory holding downloaded media.

    Provides automatic cleanup via context manager protocol: the directory
    and everything in it is removed on exit, whether the block succeeded
    or raised. Removal problems are logged and never raised.
    """

    def __init__(self, base_dir: Optional[str] = None, correlation_id: Optional[str] = None):
        """Create a unique temporary directory.

        Args:
            base_dir: Parent directory, the system temp dir when None
            correlation_id: Optional ID included in the directory name
        """
        self.correlation_id = correlation_id

        if base_dir:
            os.makedirs(base_dir, exist_ok=True)

        prefix = f"{TEMP_PREFIX}{correlation_id}_" if correlation_id else TEMP_PREFIX
        self.temp_dir = tempfile.mkdtemp(prefix=prefix, dir=base_dir)

        # Register in active managers set
        active_temp_managers.add(self)

        logger.debug(f"Created temp directory: {self.temp_dir}")

    def get_temp_path(self, filename: str) -> str:
        """Get absolute path for a file in the temp directory.

        Args:
            filename: Name of the file (without directory components)

        Returns:
            Absolute path to the file in temp directory
        """
        # Ensure filename doesn't contain path separators
        safe_filename = os.path.basename(filename)
        return os.path.join(self.temp_dir, safe_filename)

    def cleanup(self) -> bool:
        """Remove the temporary directory and all its contents.

        Returns:
            True if the directory is gone afterwards, False if removal failed
        """
        active_temp_managers.discard(self)

        if not os.path.exists(self.temp_dir):
            return True

        try:
            shutil.rmtree(self.temp_dir)
        except OSError as e:
            logger.warning(f"Could not fully clean up temp directory {self.temp_dir}: {e}")
            return False

        logger.debug(f"Cleaned up temp directory: {self.temp_dir}")
        return True

    def __enter__(self):
        """Enter context manager."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Exit context manager - always cleanup."""
        self.cleanup()
        return False  # Don't suppress exceptions


def cleanup_active_temp_managers() -> int:
    """Clean up every temp directory still in use, e.g. on shutdown.

    Returns:
        Number of managers cleaned up
    """
    cleanup_count = 0
    for temp_mgr in list(active_temp_managers):
        if temp_mgr.cleanup():
            cleanup_count += 1

    if cleanup_count > 0:
        logger.info(f"Cleaned up {cleanup_count} active temp managers")
    return cleanup_count


def cleanup_old_temp_directories(max_age_hours: int = 24, base_dir: Optional[str] = None) -> int:
    """Remove temp directories left behind by earlier runs.

    Scans for mediabot_* directories and removes those older than the
    specified age.

    Args:
        max_age_hours: Remove directories older than this many hours
        base_dir: Directory to scan, the system temp dir when None

    Returns:
        Number of directories removed
    """
    temp_dir = base_dir or tempfile.gettempdir()
    pattern = os.path.join(temp_dir, f"{TEMP_PREFIX}*")

    current_time = time.time()
    max_age_seconds = max_age_hours * 3600

    removed_count = 0
    for dir_path in glob.glob(pattern):
        if not os.path.isdir(dir_path):
            continue
        try:
            age_seconds = current_time - os.path.getmtime(dir_path)
            if age_seconds > max_age_seconds:
                shutil.rmtree(dir_path)
                removed_count += 1
                logger.info(f"Removed old temp directory: {dir_path} (age: {age_seconds/3600:.1f} hours)")
        except OSError as e:
            logger.warning(f"Failed to check/remove old temp directory {dir_path}: {e}")

    if removed_count > 0:
        logger.info(f"Cleaned up {removed_count} old temporary directories")

    return removed_count
