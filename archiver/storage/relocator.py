"""Move staged uploads into the archive.

The destination is claimed first with an exclusive create, so two uploads can
never end up at the same archival name: whoever loses the claim gets
``FileExistsError`` and nothing of the winner is touched. The claimed
placeholder is then replaced by ``os.rename`` (same volume) or by a verified
copy from a hidden temp file (cross volume). A partially copied file never
appears under the archival name.
"""

import errno
import os
import shutil
import time
from pathlib import Path

from archiver.logging.logger import Log

_VERIFY_IO_WAIT_SECONDS = 3.0


def _verify_size(dest: Path, expected_size: int) -> None:
    """Network filesystems can report stale sizes briefly after large writes."""
    actual_size = dest.stat().st_size
    if actual_size == expected_size:
        return
    Log.debug(f"Copy size mismatch, waiting for filesystem sync: {dest}")
    time.sleep(_VERIFY_IO_WAIT_SECONDS)
    actual_size = dest.stat().st_size
    if actual_size != expected_size:
        raise OSError(
            f"Copy incomplete: '{dest}' is {actual_size} bytes, expected {expected_size}"
        )


def claim(dest: Path) -> None:
    """Create an empty placeholder at ``dest``; FileExistsError if it is taken."""
    fd = os.open(str(dest), os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o666)
    os.close(fd)


def _copy_then_delete(source: Path, dest: Path) -> None:
    expected_size = source.stat().st_size
    temp_path = dest.parent / f".{dest.name}.tmp"
    try:
        shutil.copy2(source, temp_path)
        _verify_size(temp_path, expected_size)
        temp_path.replace(dest)
    except BaseException:
        temp_path.unlink(missing_ok=True)
        raise
    source.unlink()


def relocate(source: Path, dest: Path) -> str:
    """Move ``source`` to ``dest``; returns ``"rename"`` or ``"copy"``.

    Raises:
        FileExistsError: if ``dest`` is already taken.
        OSError: any failure other than a cross-device rename.
    """
    claim(dest)
    try:
        try:
            os.rename(source, dest)
            return "rename"
        except OSError as exc:
            if exc.errno != errno.EXDEV:
                raise
        Log.warning(f"Source and archive are on different volumes, copying: {source} -> {dest}")
        _copy_then_delete(source, dest)
        return "copy"
    except BaseException:
        if source.exists():
            dest.unlink(missing_ok=True)
        raise
