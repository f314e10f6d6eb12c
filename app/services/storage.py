"""
Storage backends for uploaded screenshots.

Two implementations share one interface:
- LocalStorageBackend: files in a directory served back by this service
- SupabaseStorageBackend: objects in a Supabase Storage bucket
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from stat import S_ISREG
from typing import AsyncGenerator, List, Optional
from urllib.parse import quote, unquote, urlsplit

import aiofiles
import aiofiles.os
from fastapi.concurrency import run_in_threadpool

from app.models import DeleteAllResult, UploadRecord
from app.core.exceptions import BackendError
from app.utils.file_utils import ensure_directory_exists, parse_stored_name

logger = logging.getLogger(__name__)


class StorageBackend(ABC):
    """Interface for screenshot storage (local or managed)."""

    @abstractmethod
    async def store(self, data: bytes, name: str, content_type: Optional[str] = None) -> str:
        """
        Store bytes under `name` and return the public URL.
        """

    @abstractmethod
    async def list(self) -> List[UploadRecord]:
        """
        Return every stored entry. Order is unspecified.
        """

    @abstractmethod
    async def delete(self, url: str) -> None:
        """
        Delete the entry behind `url`. Deleting an absent entry is not an error.
        """

    async def delete_all(self) -> DeleteAllResult:
        """
        Delete every entry concurrently and collect the individual outcomes.
        """
        records = await self.list()
        results = await asyncio.gather(
            *(self.delete(record.url) for record in records),
            return_exceptions=True,
        )

        failed = []
        for record, result in zip(records, results):
            if isinstance(result, Exception):
                logger.error(f"Failed to delete {record.url}: {result}")
                failed.append(record.url)

        return DeleteAllResult(
            success=not failed,
            deleted=len(records) - len(failed),
            failed=failed,
        )


class LocalStorageBackend(StorageBackend):
    """
    Stores uploads as plain files in a directory.

    Public URLs are `<base_url><url_path>/<name>`; the files themselves are
    served by the `/uploads/{name}` route.
    """

    def __init__(self, upload_dir: Path, base_url: str, url_path: str = "/uploads"):
        self.upload_dir = Path(upload_dir)
        self.base_url = base_url.rstrip("/")
        self.url_path = "/" + url_path.strip("/")

        ensure_directory_exists(self.upload_dir)

    def url_for(self, name: str) -> str:
        return f"{self.base_url}{self.url_path}/{quote(name)}"

    def path_for(self, name: str) -> Optional[Path]:
        """
        Resolve a stored name to a path inside the upload directory.
        Returns None for names that would escape it.
        """
        if not name or name in (".", "..") or "/" in name or "\\" in name:
            return None
        return self.upload_dir / name

    def name_from_url(self, url: str) -> Optional[str]:
        """
        Extract the stored name from one of our public URLs.
        """
        parts = urlsplit(url)
        base = urlsplit(self.base_url)
        prefix = f"{base.path.rstrip('/')}{self.url_path}/"
        if parts.netloc != base.netloc or not parts.path.startswith(prefix):
            return None
        name = unquote(parts.path[len(prefix):])
        return name if self.path_for(name) is not None else None

    async def store(self, data: bytes, name: str, content_type: Optional[str] = None) -> str:
        file_path = self.path_for(name)
        if file_path is None:
            raise BackendError(f"Invalid storage name: {name!r}")

        try:
            async with aiofiles.open(file_path, "xb") as f:
                await f.write(data)
        except FileExistsError as e:
            raise BackendError(f"{file_path} already exists") from e
        except OSError as e:
            raise BackendError(f"Failed to write {file_path}: {e}") from e

        logger.info(f"Stored {len(data)} bytes as {file_path}")
        return self.url_for(name)

    async def list(self) -> List[UploadRecord]:
        try:
            entries = list(self.upload_dir.iterdir())
        except FileNotFoundError:
            return []
        except OSError as e:
            raise BackendError(f"Failed to list {self.upload_dir}: {e}") from e

        records = []
        for file_path in entries:
            # Entries can vanish while a delete runs alongside
            try:
                file_stat = file_path.stat()
            except FileNotFoundError:
                continue
            if not S_ISREG(file_stat.st_mode):
                continue

            timestamp, _ = parse_stored_name(file_path.name)
            if timestamp is None:
                timestamp = int(file_stat.st_mtime * 1000)
            records.append(UploadRecord(
                url=self.url_for(file_path.name),
                filename=file_path.name,
                timestamp=timestamp,
            ))

        records.sort(key=lambda r: r.timestamp, reverse=True)
        return records

    async def delete(self, url: str) -> None:
        name = self.name_from_url(url)
        if name is None:
            logger.info(f"Ignoring delete for foreign URL {url}")
            return

        try:
            await aiofiles.os.remove(self.upload_dir / name)
        except FileNotFoundError:
            return
        except OSError as e:
            raise BackendError(f"Failed to delete {name}: {e}") from e

        logger.info(f"Deleted {name}")

    async def read_file(self, name: str, chunk_size: int = 1024 * 1024) -> AsyncGenerator[bytes, None]:
        """
        Read a stored file and yield chunks.
        Used for streaming files back to browsers.
        """
        file_path = self.path_for(name)
        if file_path is None or not file_path.is_file():
            raise FileNotFoundError(name)

        async with aiofiles.open(file_path, "rb") as f:
            while True:
                chunk = await f.read(chunk_size)
                if not chunk:
                    break
                yield chunk


class SupabaseStorageBackend(StorageBackend):
    """
    Stores uploads in a Supabase Storage bucket.

    The Supabase SDK is synchronous, so every call runs in the threadpool.
    """

    def __init__(self, client, bucket: str, page_size: int = 100):
        self.client = client
        self.bucket = bucket
        self.page_size = page_size

    @property
    def _bucket(self):
        return self.client.storage.from_(self.bucket)

    def url_for(self, name: str) -> str:
        # get_public_url may append an empty query string
        url = self._bucket.get_public_url(name)
        return url.rstrip("?")

    def name_from_url(self, url: str) -> Optional[str]:
        parts = urlsplit(url)
        public = urlsplit(self.url_for(""))
        if parts.netloc != public.netloc or not parts.path.startswith(public.path):
            return None
        name = unquote(parts.path[len(public.path):])
        return name or None

    async def store(self, data: bytes, name: str, content_type: Optional[str] = None) -> str:
        try:
            await run_in_threadpool(
                self._bucket.upload,
                path=name,
                file=data,
                file_options={"content-type": content_type or "application/octet-stream"},
            )
            url = self.url_for(name)
        except Exception as e:
            raise BackendError(f"Failed to upload {self.bucket}/{name}: {e}") from e

        logger.info(f"Uploaded file to {self.bucket}/{name}")
        return url

    async def list(self) -> List[UploadRecord]:
        records = []
        offset = 0
        try:
            while True:
                page = await run_in_threadpool(
                    self._bucket.list,
                    None,
                    {
                        "limit": self.page_size,
                        "offset": offset,
                        "sortBy": {"column": "created_at", "order": "desc"},
                    },
                )
                for entry in page:
                    # Folders come back without an id
                    if entry.get("id") is None:
                        continue
                    records.append(self._to_record(entry))
                if len(page) < self.page_size:
                    break
                offset += self.page_size
        except BackendError:
            raise
        except Exception as e:
            raise BackendError(f"Failed to list bucket {self.bucket}: {e}") from e

        return records

    async def delete(self, url: str) -> None:
        name = self.name_from_url(url)
        if name is None:
            logger.info(f"Ignoring delete for foreign URL {url}")
            return

        try:
            await run_in_threadpool(self._bucket.remove, [name])
        except Exception as e:
            raise BackendError(f"Failed to delete {self.bucket}/{name}: {e}") from e

        logger.info(f"Deleted {self.bucket}/{name}")

    def _to_record(self, entry: dict) -> UploadRecord:
        name = entry["name"]
        created_at = entry.get("created_at")
        if created_at:
            timestamp = int(datetime.fromisoformat(created_at.replace("Z", "+00:00")).timestamp() * 1000)
        else:
            timestamp, _ = parse_stored_name(name)
            if timestamp is None:
                raise BackendError(f"Object {name} carries no upload time")
        return UploadRecord(url=self.url_for(name), filename=name, timestamp=timestamp)
