"""Local filesystem adapter.

Each bucket is a JSON file named ``bucket-<id>.json`` inside a root
directory.  Writes go to a temporary file in the same directory which is
then moved over the target with :func:`os.replace`, so a reader never sees
a half-written record.
"""

from __future__ import annotations

import os
import stat
import tempfile
from pathlib import Path

from leakybucket.errors import AdapterError, BucketNotFoundError
from leakybucket.observability import get_logger

log = get_logger("leakybucket.adapters.local")


class LocalAdapter:
    """Store bucket records as files under *root*.

    Saved files get the mode a plain ``open()`` would give them: ``0o666``
    less the process umask read at construction.

    Parameters
    ----------
    root:
        Directory holding the bucket files.  Created (with parents) on the
        first save if it does not exist.
    """

    def __init__(self, root: str | os.PathLike[str]) -> None:
        self.root: Path = Path(root)
        # os.umask can only be read by setting it.
        umask = os.umask(0)
        os.umask(umask)
        self.file_mode: int = 0o666 & ~umask

    def filename(self, bucket_id: str) -> str:
        return f"bucket-{bucket_id}.json"

    def path_for(self, bucket_id: str) -> Path:
        """Return the path of the record for *bucket_id*.

        Raises
        ------
        AdapterError
            If *bucket_id* would place the file outside :attr:`root`.
        """
        name = self.filename(bucket_id)
        if os.sep in name or (os.altsep and os.altsep in name):
            raise AdapterError(
                f"Invalid bucket ID for local storage ({bucket_id})",
                context={"bucket_id": bucket_id, "adapter": "local"},
            )
        return self.root / name

    def exists(self, bucket_id: str) -> bool:
        path = self.path_for(bucket_id)
        try:
            mode = path.stat().st_mode
        except (FileNotFoundError, NotADirectoryError):
            return False
        except OSError as exc:
            raise AdapterError(
                f"Unable to check ({path.name})",
                context={"bucket_id": bucket_id, "operation": "check", "adapter": "local"},
                cause=exc,
            ) from exc
        return stat.S_ISREG(mode)

    def save(self, bucket_id: str, contents: str) -> None:
        path = self.path_for(bucket_id)
        tmp_name: str | None = None
        try:
            path.parent.mkdir(mode=0o755, parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{path.name}.", suffix=".tmp", dir=path.parent,
            )
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(contents)
            os.chmod(tmp_name, self.file_mode)
            os.replace(tmp_name, path)
            tmp_name = None
        except OSError as exc:
            log.warning(
                "local save failed",
                extra={"extra_fields": {"bucket_id": bucket_id, "path": str(path), "error": str(exc)}},
            )
            raise AdapterError(
                f"Unable to save ({path.name})",
                context={"bucket_id": bucket_id, "operation": "save", "adapter": "local"},
                cause=exc,
            ) from exc
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
        log.debug("local save", extra={"extra_fields": {"bucket_id": bucket_id, "path": str(path)}})

    def read(self, bucket_id: str) -> str:
        path = self.path_for(bucket_id)
        try:
            contents = path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise BucketNotFoundError(
                f"Unable to read ({path.name})",
                context={"bucket_id": bucket_id, "operation": "read", "adapter": "local"},
                cause=exc,
            ) from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise AdapterError(
                f"Unable to read ({path.name})",
                context={"bucket_id": bucket_id, "operation": "read", "adapter": "local"},
                cause=exc,
            ) from exc
        if not contents:
            raise AdapterError(
                f"Unable to read ({path.name}): file is empty",
                context={"bucket_id": bucket_id, "operation": "read", "adapter": "local"},
            )
        return contents

    def delete(self, bucket_id: str) -> None:
        path = self.path_for(bucket_id)
        try:
            path.unlink()
        except FileNotFoundError as exc:
            raise BucketNotFoundError(
                f"Unable to delete ({path.name})",
                context={"bucket_id": bucket_id, "operation": "delete", "adapter": "local"},
                cause=exc,
            ) from exc
        except OSError as exc:
            raise AdapterError(
                f"Unable to delete ({path.name})",
                context={"bucket_id": bucket_id, "operation": "delete", "adapter": "local"},
                cause=exc,
            ) from exc
        log.debug("local delete", extra={"extra_fields": {"bucket_id": bucket_id, "path": str(path)}})
