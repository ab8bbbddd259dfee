"""Persistence backends for the file registry.

The registry is a flat JSON array rewritten wholesale on every mutation.

Usage in routes:
    from pitchvault.database import get_registry

    @router.get("/items")
    async def list_items(registry: FileRegistry = Depends(get_registry)):
        return [r.to_view() for r in registry.list()]
"""
import json
import os
import tempfile
from pathlib import Path
from typing import Optional

import aiofiles
from fastapi import Request


class JsonFileBackend:
    """Reads and writes the registry as one pretty-printed JSON file."""

    def __init__(self, path: str):
        self.path = Path(path)

    async def read(self) -> Optional[list]:
        """Return the decoded payload, or None when the file does not exist yet.

        Decode errors propagate so the registry can log and fall back.
        """
        if not self.path.exists():
            return None
        async with aiofiles.open(self.path, "r", encoding="utf-8") as f:
            raw = await f.read()
        return json.loads(raw)

    async def write(self, payload: list) -> None:
        """Write to a temp file next to the target, then rename over it."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
        )
        os.close(fd)
        try:
            async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
                await f.write(json.dumps(payload, indent=2))
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise


class MemoryBackend:
    """Keeps the last written payload in memory. For tests."""

    def __init__(self, initial: Optional[list] = None):
        self.payload = initial
        self.writes = 0

    async def read(self) -> Optional[list]:
        return self.payload

    async def write(self, payload: list) -> None:
        self.payload = json.loads(json.dumps(payload))
        self.writes += 1


def get_registry(request: Request):
    """FastAPI dependency that returns the registry built at startup."""
    return request.app.state.registry
