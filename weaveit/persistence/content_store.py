"""
Filesystem Content Store.

A flat directory of `{content_id}.mp3`, `{content_id}.mp4` and
`{content_id}.failed` files. File existence is the only job status there is.

Writers never touch a final path directly: output goes to a hidden temporary
sibling which is flushed, fsynced and then renamed over the final path with
os.replace, so readers see either nothing, the previous artifact, or the
complete new one.
"""
import errno
import json
import logging
import os
import shutil
import tempfile
from contextlib import contextmanager
from datetime import datetime, timezone
from functools import lru_cache
from pathlib import Path
from typing import BinaryIO, Iterator, Optional

from weaveit.exceptions import NotFound, PipelineError, StoreWriteFailed
from weaveit.keys import AUDIO_SUFFIX, FAILURE_SUFFIX, VIDEO_SUFFIX, validate_content_id

logger = logging.getLogger(__name__)

ALLOWED_SUFFIXES = (AUDIO_SUFFIX, VIDEO_SUFFIX, FAILURE_SUFFIX)
SCRATCH_DIRNAME = ".work"


def _fsync_file(path: Path) -> None:
    with open(path, "rb") as f:
        os.fsync(f.fileno())


def _fsync_dir(path: Path) -> None:
    # Directory fsync is not supported everywhere (e.g. Windows)
    try:
        fd = os.open(path, os.O_RDONLY)
    except OSError:
        return
    try:
        os.fsync(fd)
    except OSError:
        pass
    finally:
        os.close(fd)


@contextmanager
def atomic_destination(final_path: Path, allow_empty: bool = False) -> Iterator[Path]:
    """
    Yield a temporary path next to `final_path`; rename it into place on success.

    The temporary file keeps the final extension so encoders that pick a
    container from the filename still work. On any error the temporary file
    is removed and `final_path` is left untouched.
    """
    final_path = Path(final_path)
    final_path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        dir=final_path.parent,
        prefix=f".{final_path.name}.",
        suffix=final_path.suffix,
    )
    os.close(fd)
    tmp_path = Path(tmp_name)

    try:
        yield tmp_path
        if not tmp_path.exists():
            raise FileNotFoundError(f"Nothing was written to {tmp_path}")
        if not allow_empty and tmp_path.stat().st_size == 0:
            raise ValueError(f"Refusing to publish empty file as {final_path.name}")
        _fsync_file(tmp_path)
        os.replace(tmp_path, final_path)
        _fsync_dir(final_path.parent)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


class ContentStore:
    """Content-addressed artifact directory."""

    def __init__(self, root: Path):
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)
        self.scratch_root = self.root / SCRATCH_DIRNAME

    def path_for(self, content_id: str, suffix: str) -> Path:
        validate_content_id(content_id)
        if suffix not in ALLOWED_SUFFIXES:
            raise ValueError(f"Unsupported artifact suffix: {suffix}")
        return self.root / f"{content_id}.{suffix}"

    def exists(self, content_id: str, suffix: str) -> bool:
        path = self.path_for(content_id, suffix)
        try:
            return path.is_file() and path.stat().st_size > 0
        except OSError:
            return False

    def read(self, content_id: str, suffix: str) -> BinaryIO:
        """Open an artifact for reading. Caller closes the stream."""
        if not self.exists(content_id, suffix):
            raise NotFound(content_id, suffix)
        try:
            return open(self.path_for(content_id, suffix), "rb")
        except FileNotFoundError:
            raise NotFound(content_id, suffix)

    def write(self, content_id: str, suffix: str, data: bytes) -> Path:
        """Atomically write a complete artifact."""
        with self.staging(content_id, suffix) as tmp_path:
            tmp_path.write_bytes(data)
        return self.path_for(content_id, suffix)

    @contextmanager
    def staging(self, content_id: str, suffix: str) -> Iterator[Path]:
        """
        Temporary path for a stage to write into; published on clean exit.

        Errors raised by the caller inside the block propagate unchanged.
        Failures of the publish step itself become StoreWriteFailed.
        """
        final_path = self.path_for(content_id, suffix)
        body_failed = False
        try:
            with atomic_destination(final_path) as tmp_path:
                try:
                    yield tmp_path
                except BaseException:
                    body_failed = True
                    raise
        except (OSError, ValueError) as e:
            if body_failed:
                raise
            logger.error(f"[{content_id}] Failed to publish {final_path.name}: {e}")
            raise StoreWriteFailed(f"Could not write {final_path.name}: {e}", content_id=content_id, cause=e) from e

        logger.debug(f"[{content_id}] Published {final_path.name}")

    def publish(self, content_id: str, suffix: str, source: Path) -> Path:
        """Move a finished file (normally from the scratch area) into place."""
        final_path = self.path_for(content_id, suffix)
        source = Path(source)
        try:
            if source.stat().st_size == 0:
                raise ValueError(f"{source.name} is empty")
            _fsync_file(source)
            os.replace(source, final_path)
            _fsync_dir(self.root)
        except OSError as e:
            if e.errno == errno.EXDEV:
                with self.staging(content_id, suffix) as tmp_path:
                    shutil.copyfile(source, tmp_path)
                source.unlink(missing_ok=True)
                return final_path
            raise StoreWriteFailed(f"Could not publish {final_path.name}: {e}", content_id=content_id, cause=e) from e
        except ValueError as e:
            raise StoreWriteFailed(f"Could not publish {final_path.name}: {e}", content_id=content_id, cause=e) from e

        logger.info(f"[{content_id}] Published {final_path.name}")
        return final_path

    # Scratch area: private per-job work files, invisible to status checks

    def scratch_dir(self, content_id: str) -> Path:
        validate_content_id(content_id)
        self.scratch_root.mkdir(parents=True, exist_ok=True)
        return Path(tempfile.mkdtemp(dir=self.scratch_root, prefix=f"{content_id}."))

    def discard_scratch(self, path: Path) -> None:
        path = Path(path)
        if self.scratch_root not in path.parents:
            raise ValueError(f"{path} is not a scratch directory")
        shutil.rmtree(path, ignore_errors=True)

    # Failure markers

    def mark_failed(self, content_id: str, error: BaseException, stage: Optional[str] = None) -> Path:
        if isinstance(error, PipelineError):
            details = error.to_dict()
        else:
            details = {"stage": stage or "pipeline", "code": "PIPELINE_ERROR", "error": str(error), "cause": None}
        if stage:
            details["stage"] = stage
        details["content_id"] = content_id
        details["failed_at"] = datetime.now(timezone.utc).isoformat()
        return self.write(content_id, FAILURE_SUFFIX, json.dumps(details).encode("utf-8"))

    def read_failure(self, content_id: str) -> Optional[dict]:
        path = self.path_for(content_id, FAILURE_SUFFIX)
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            logger.warning(f"[{content_id}] Unreadable failure marker: {e}")
            return {"content_id": content_id, "stage": "unknown", "error": "failure marker unreadable"}

    def clear_failure(self, content_id: str) -> None:
        self.path_for(content_id, FAILURE_SUFFIX).unlink(missing_ok=True)


@lru_cache()
def get_content_store() -> ContentStore:
    """Get cached ContentStore for the configured content directory."""
    from weaveit.config import config

    return ContentStore(config.paths.content_dir)
