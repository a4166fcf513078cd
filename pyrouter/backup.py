"""
Backup of generated configuration files
"""
import os
import shutil
from .utils import warn, warn_continue, timestamp


def backup_path_for(path, stamp=None):
    """Return a free '<path>.bak.<timestamp>' name."""
    stamp = timestamp() if stamp is None else stamp
    candidate = f"{path}.bak.{stamp}"
    counter = 1
    while os.path.exists(candidate):
        candidate = f"{path}.bak.{stamp}.{counter}"
        counter += 1
    return candidate


def backup_file(path):
    """
    Copy an existing file aside before it gets overwritten.
    Returns the backup path, or None when there was nothing to back up.
    """
    if not os.path.exists(path):
        return None

    destination = backup_path_for(path)
    try:
        shutil.copy2(path, destination)
    except OSError as e:
        warn_continue(f"Failed to back up {path}: {e}")
        return None

    warn(f"Backed up previous {path} to {destination}")
    return destination
