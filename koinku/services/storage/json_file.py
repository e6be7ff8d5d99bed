"""
JSON File Storage Implementation

DESIGN DECISION: The ledger lives in a single JSON file named after the
well-known storage key, because:
1. The whole log is always loaded and saved as one unit
2. A personal ledger stays small enough to rewrite on every change
3. Users can inspect or back up one plain file

Atomicity: writes target a sibling ``.tmp`` file first, are fsync'd, and are
then ``os.replace``d into place. A crash or error mid-write leaves the
previous file untouched.

Blocking file I/O runs in a worker thread bounded by the configured timeout.
"""

import asyncio
import contextlib
import os
import threading
from pathlib import Path
from typing import Optional, Sequence

from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from koinku.config import get_settings
from koinku.models.ledger import LedgerDocument, Transaction
from koinku.services.storage.interface import (
    CorruptData,
    LedgerStorageInterface,
    StorageUnavailable,
    StorageWriteFailed,
)


class JsonFileLedgerStorage(LedgerStorageInterface):
    """
    File-backed ledger storage.

    Saves are numbered; a write that was overtaken by a newer one
    (e.g. after a timeout) is dropped rather than allowed to land late.
    """

    def __init__(
        self,
        path: Optional[Path] = None,
        timeout: Optional[float] = None,
    ):
        if path is None or timeout is None:
            settings = get_settings().ledger
            path = path if path is not None else settings.storage_path
            timeout = timeout if timeout is not None else settings.io_timeout_seconds

        self._path = Path(path)
        self._timeout = timeout
        self._write_lock = threading.Lock()
        self._generation = 0
        self._committed_generation = 0

    @property
    def path(self) -> Path:
        return self._path

    def _read_bytes(self) -> Optional[bytes]:
        """Read the raw file, or None on first run."""
        try:
            return self._path.read_bytes()
        except FileNotFoundError:
            return None

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
        retry=retry_if_exception_type(OSError),
        reraise=True,
    )
    def _write_blob(self, blob: str, generation: int) -> None:
        """Atomically replace the file with `blob`."""
        with self._write_lock:
            if generation < self._committed_generation:
                return

            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self._path.with_suffix(self._path.suffix + ".tmp")
            try:
                with open(tmp, "w", encoding="utf-8") as fh:
                    fh.write(blob)
                    fh.flush()
                    os.fsync(fh.fileno())
                os.replace(tmp, self._path)
            except Exception:
                with contextlib.suppress(FileNotFoundError):
                    tmp.unlink()
                raise

            self._committed_generation = generation

    async def load(self) -> list[Transaction]:
        """Load the transaction log from disk."""
        try:
            raw = await asyncio.wait_for(
                asyncio.to_thread(self._read_bytes),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError as e:
            raise StorageUnavailable(
                f"Timed out after {self._timeout}s reading {self._path}"
            ) from e
        except OSError as e:
            raise StorageUnavailable(f"Cannot read ledger file {self._path}: {e}") from e

        if raw is None:
            return []

        try:
            return LedgerDocument.from_json(raw.decode("utf-8")).transactions
        except ValueError as e:
            raise CorruptData(f"Ledger file {self._path} is malformed: {e}") from e

    async def save(self, transactions: Sequence[Transaction]) -> None:
        """Write the full transaction log to disk."""
        blob = LedgerDocument(transactions=list(transactions)).to_json()
        self._generation += 1

        try:
            await asyncio.wait_for(
                asyncio.to_thread(self._write_blob, blob, self._generation),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError as e:
            raise StorageWriteFailed(
                f"Timed out after {self._timeout}s writing {self._path}"
            ) from e
        except OSError as e:
            raise StorageWriteFailed(f"Failed to write ledger file {self._path}: {e}") from e
