"""
Upload history held by the client.

UploadHistory is the single owned container the UI reads from; HistoryCache
keeps a durable copy between sessions.
"""

import json
import logging
from pathlib import Path
from typing import Iterable, Iterator, List

import aiofiles

from app.models import UploadRecord

logger = logging.getLogger(__name__)

CACHE_KEY = "uploads"


class UploadHistory:
    """Upload records ordered most recent first, unique by URL."""

    def __init__(self, records: Iterable[UploadRecord] = ()):
        self._records: List[UploadRecord] = []
        self.replace_all(records)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[UploadRecord]:
        return iter(self._records)

    def __getitem__(self, index: int) -> UploadRecord:
        return self._records[index]

    @property
    def records(self) -> List[UploadRecord]:
        return list(self._records)

    @property
    def urls(self) -> List[str]:
        return [record.url for record in self._records]

    def prepend(self, record: UploadRecord) -> None:
        self._records = [record] + [r for r in self._records if r.url != record.url]

    def remove(self, url: str) -> bool:
        """
        Remove the record with `url`. Returns False when it was not present.
        """
        remaining = [r for r in self._records if r.url != url]
        removed = len(remaining) != len(self._records)
        self._records = remaining
        return removed

    def replace_all(self, records: Iterable[UploadRecord]) -> None:
        unique = {}
        for record in records:
            unique.setdefault(record.url, record)
        self._records = sorted(unique.values(), key=lambda r: r.timestamp, reverse=True)

    def reconcile(self, remote: Iterable[UploadRecord]) -> None:
        """
        Merge a fresh backend listing into the history.

        The backend decides presence: local records it does not list are
        dropped, and records it lists are taken as the backend reports them.
        """
        self.replace_all(remote)


class HistoryCache:
    """
    JSON file holding the last known history under a single key.
    The whole document is rewritten on every save.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    async def load(self) -> List[UploadRecord]:
        try:
            async with aiofiles.open(self.path, "r") as f:
                content = await f.read()
        except FileNotFoundError:
            return []

        try:
            return [UploadRecord(**item) for item in json.loads(content)[CACHE_KEY]]
        except (ValueError, KeyError, TypeError) as e:
            logger.warning(f"Ignoring unreadable history cache {self.path}: {e}")
            return []

    async def save(self, records: Iterable[UploadRecord]) -> None:
        document = {CACHE_KEY: [record.model_dump() for record in records]}
        self.path.parent.mkdir(parents=True, exist_ok=True)
        async with aiofiles.open(self.path, "w") as f:
            await f.write(json.dumps(document))
