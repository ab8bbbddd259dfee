"""In-memory file registry mirrored to a persistence backend.

The in-memory list is the source of truth for the running process. The
backend is read once at startup and rewritten after every mutation; a failed
write is logged and the process keeps serving from memory.
"""
import asyncio
import logging
from datetime import datetime, timezone
from typing import Iterable, Optional

from pydantic import ValidationError as PydanticValidationError

from pitchvault.errors import NotFoundError, ValidationError
from pitchvault.models.file_record import AccessMode, FileRecord

logger = logging.getLogger(__name__)


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision and a Z suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class FileRegistry:
    """Authoritative collection of FileRecords."""

    def __init__(self, backend):
        self.backend = backend
        self._records: list[FileRecord] = []
        # Raw entries from disk that did not load; written back untouched
        self._unparsed: list = []
        self._lock = asyncio.Lock()

    async def load(self) -> None:
        """Restore records from the backend. Never raises."""
        try:
            payload = await self.backend.read()
        except Exception as e:
            logger.error(f"Error reading files database: {e}")
            self._records = []
            return

        if payload is None:
            self._records = []
            return
        if not isinstance(payload, list):
            logger.error("Files database is not a JSON array, starting empty")
            self._records = []
            return

        unparsed = []
        records = []
        seen = set()
        for item in payload:
            try:
                record = FileRecord.model_validate(item)
            except PydanticValidationError as e:
                logger.warning(f"Skipping invalid record in files database: {e.error_count()} error(s)")
                unparsed.append(item)
                continue
            if record.id in seen:
                logger.warning(f"Skipping duplicate record id {record.id} in files database")
                unparsed.append(item)
                continue
            seen.add(record.id)
            records.append(record)
        self._records = records
        self._unparsed = unparsed
        logger.info(f"Loaded {len(records)} file record(s)")
        if unparsed:
            logger.warning(f"Kept {len(unparsed)} unloadable entry(ies) on disk until the next bulk replace")

    def list(self) -> list[FileRecord]:
        return [r.model_copy() for r in self._records]

    def get(self, file_id: str) -> Optional[FileRecord]:
        index = self._index_of(file_id)
        if index is None:
            return None
        return self._records[index].model_copy()

    async def replace_all(self, records: Iterable) -> None:
        """Replace the whole collection. Items may be FileRecords or dicts."""
        if not isinstance(records, (list, tuple)):
            raise ValidationError("Invalid files data")

        parsed = []
        seen = set()
        for item in records:
            record = item if isinstance(item, FileRecord) else self._parse(item)
            if record.id in seen:
                raise ValidationError(f"Duplicate file id: {record.id}")
            seen.add(record.id)
            parsed.append(record.model_copy())

        async with self._lock:
            self._records = parsed
            self._unparsed = []
            await self.persist()
        logger.info(f"Files list replaced ({len(parsed)} record(s))")

    async def append(self, record: FileRecord) -> None:
        async with self._lock:
            if self._index_of(record.id) is not None:
                raise ValidationError(f"Duplicate file id: {record.id}")
            self._records.append(record.model_copy())
            await self.persist()

    async def rename(self, file_id: str, name: str) -> FileRecord:
        """Change a record's display name. Nothing else about a record is editable."""
        name = (name or "").strip()
        if not name:
            raise ValidationError("File name is required")

        async with self._lock:
            index = self._index_of(file_id)
            if index is None:
                raise NotFoundError()
            record = self._records[index]
            record.name = name
            await self.persist()
            return record.model_copy()

    async def record_access(self, file_id: str) -> FileRecord:
        """Bump access statistics for one successful byte-serving access."""
        async with self._lock:
            index = self._index_of(file_id)
            if index is None:
                raise NotFoundError()
            record = self._records[index]
            record.access_count = record.access_count + 1
            record.last_accessed = utc_now_iso()
            await self.persist()
            return record.model_copy()

    async def remove_by_id(self, file_id: str) -> FileRecord:
        async with self._lock:
            index = self._index_of(file_id)
            if index is None:
                raise NotFoundError()
            removed = self._records.pop(index)
            await self.persist()
            return removed

    async def persist(self) -> None:
        """Write the full collection. Failures are logged, not raised."""
        payload = [r.to_view() for r in self._records] + self._unparsed
        try:
            await self.backend.write(payload)
        except Exception as e:
            logger.error(f"Error saving files database: {e}")

    def counts(self) -> dict:
        modes = [r.mode for r in self._records]
        return {
            "filesCount": len(modes),
            "externalFiles": modes.count(AccessMode.EXTERNAL),
            "localFiles": modes.count(AccessMode.LOCAL_PDF),
            "serverFiles": modes.count(AccessMode.SERVER_UPLOAD),
        }

    def _index_of(self, file_id: str) -> Optional[int]:
        for i, record in enumerate(self._records):
            if record.id == file_id:
                return i
        return None

    @staticmethod
    def _parse(item) -> FileRecord:
        if not isinstance(item, dict):
            raise ValidationError("Invalid files data")
        try:
            return FileRecord.model_validate(item)
        except PydanticValidationError as e:
            first = e.errors()[0]
            field = ".".join(str(p) for p in first.get("loc", ()))
            raise ValidationError(f"Invalid file record ({field}): {first.get('msg')}") from e
