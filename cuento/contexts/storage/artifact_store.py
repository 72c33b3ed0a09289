"""
Artifact persistence and lifecycle management.

Writes rendered buffers into the output directory and maintains that
directory: aggregate statistics over stored PDFs and age-based pruning.

stats() and prune_older_than() are best-effort maintenance calls: they report
failures in their result objects instead of raising, so a scheduled job can
call them without guarding.
"""

import math
import time
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import anyio

from cuento.contexts.storage.logger import _log_debug, _log_info, _log_warning, log_prune_result
from cuento.exceptions import ArtifactWriteError
from cuento.utils.timestamp import epoch_millis

ARTIFACT_EXTENSION = ".pdf"
ARTIFACT_PREFIX = "cuento"


@dataclass(frozen=True)
class SavedArtifact:
    file_path: Path
    file_name: str
    size: int


@dataclass(frozen=True)
class StoreStats:
    """
    Aggregate statistics over stored PDFs.

    Attributes:
        total_pdfs: Number of PDF files in the output directory
        total_size: Sum of their sizes in bytes
        average_size: Mean size rounded to the nearest byte (0 when empty)
        output_path: Directory that was scanned
        error: Scan failure description (degraded result), None on success
    """

    total_pdfs: int
    total_size: int
    average_size: int
    output_path: Path
    error: Optional[str] = None


@dataclass(frozen=True)
class PruneResult:
    deleted_count: int
    success: bool
    error: Optional[str] = None


def artifact_file_name(story_id: str) -> str:
    """
    Collision-resistant artifact name: cuento_<id>_<epoch-millis>_<token>.pdf

    The random token keeps names unique even for same-millisecond requests on one id.
    """
    return f"{ARTIFACT_PREFIX}_{story_id}_{epoch_millis()}_{uuid.uuid4().hex[:8]}{ARTIFACT_EXTENSION}"


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class ArtifactStore:
    """File-system store for generated artifacts rooted at one output directory."""

    def __init__(self, output_path: Path):
        self.output_path = Path(output_path)

    async def ensure_output_dir(self) -> None:
        """Create the output directory and any missing parents."""
        try:
            await anyio.Path(self.output_path).mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ArtifactWriteError(
                f"Could not create output directory {self.output_path}", original_error=exc
            ) from exc

    async def save(self, buffer: bytes, file_name: str) -> SavedArtifact:
        """
        Write a buffer into the output directory.

        Args:
            buffer: Bytes to persist
            file_name: Target file name (an existing file with this name is replaced)

        Returns:
            SavedArtifact with path, name and size

        Raises:
            ArtifactWriteError: If the directory cannot be created or the write fails
        """
        await self.ensure_output_dir()
        file_path = self.output_path / file_name

        try:
            await anyio.Path(file_path).write_bytes(buffer)
        except OSError as exc:
            raise ArtifactWriteError(f"Could not write {file_path}", original_error=exc) from exc

        _log_info(f"Saved {file_name} ({len(buffer)} bytes)")
        return SavedArtifact(file_path=file_path, file_name=file_name, size=len(buffer))

    async def write_text(self, text: str, file_path: Path) -> Path:
        """
        Write a text artifact (e.g., an HTML preview) to an explicit path.

        Raises:
            ArtifactWriteError: If the parent directory cannot be created or the write fails
        """
        file_path = Path(file_path)
        try:
            await anyio.Path(file_path.parent).mkdir(parents=True, exist_ok=True)
            await anyio.Path(file_path).write_text(text, encoding="utf-8")
        except OSError as exc:
            raise ArtifactWriteError(f"Could not write {file_path}", original_error=exc) from exc

        _log_debug(f"Wrote {file_path} ({len(text)} characters)")
        return file_path

    async def stats(self) -> StoreStats:
        """
        Count stored PDFs and their sizes. Never raises.

        Returns:
            StoreStats; on scan failure a degraded result with zero counts and `error` set
        """
        try:
            sizes = []
            async for entry in anyio.Path(self.output_path).iterdir():
                if entry.suffix == ARTIFACT_EXTENSION and await entry.is_file():
                    sizes.append((await entry.stat()).st_size)
        except Exception as exc:
            _log_warning(f"Could not scan {self.output_path}: {exc}")
            return StoreStats(
                total_pdfs=0,
                total_size=0,
                average_size=0,
                output_path=self.output_path,
                error=str(exc),
            )

        total_size = sum(sizes)
        average_size = _round_half_up(total_size / len(sizes)) if sizes else 0
        return StoreStats(
            total_pdfs=len(sizes),
            total_size=total_size,
            average_size=average_size,
            output_path=self.output_path,
        )

    async def prune_older_than(self, max_age_hours: float = 24) -> PruneResult:
        """
        Delete files last modified at or before now - max_age_hours. Never raises.

        Every regular file in the output directory is considered (PDFs and previews).
        A missing output directory has nothing to prune.

        Args:
            max_age_hours: Age threshold in hours (0 removes everything)

        Returns:
            PruneResult; on failure deleted_count=0, success=False and `error` set
        """
        output_dir = anyio.Path(self.output_path)
        cutoff = time.time() - max_age_hours * 3600

        try:
            if not await output_dir.exists():
                result = PruneResult(deleted_count=0, success=True)
                log_prune_result(result, max_age_hours)
                return result

            entries = [entry async for entry in output_dir.iterdir()]
            deleted_count = 0
            for entry in entries:
                if not await entry.is_file():
                    continue
                if (await entry.stat()).st_mtime <= cutoff:
                    await entry.unlink()
                    deleted_count += 1
                    _log_debug(f"Deleted {entry.name}")
        except Exception as exc:
            result = PruneResult(deleted_count=0, success=False, error=str(exc))
        else:
            result = PruneResult(deleted_count=deleted_count, success=True)

        log_prune_result(result, max_age_hours)
        return result
