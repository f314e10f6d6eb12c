"""
Client-side upload state machine.

Holds what the drop-zone UI shows: the drag/upload state, the upload history,
which history entry is expanded, and the short-lived "copied" indicator.
Front ends call the event methods and render from the attributes.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from app.api.schemas import DeleteAllResponse, UploadRecord
from app.client.api import UploadsClient
from app.client.clipboard import ClipboardWriter, MemoryClipboard, write_clipboard
from app.client.history import HistoryCache, UploadHistory
from app.core.config import settings
from app.core.exceptions import BackendError, ClipboardError
from app.utils.file_utils import is_image_content_type

logger = logging.getLogger(__name__)

NOT_AN_IMAGE_MESSAGE = "Please upload an image file"
UPLOAD_FAILED_MESSAGE = "Upload failed. Please try again."
DELETE_FAILED_MESSAGE = "Delete failed. Please try again."
CONFIRM_DELETE_MESSAGE = "Delete this screenshot?"
CONFIRM_DELETE_ALL_MESSAGE = "Delete all screenshots? This cannot be undone."


class UploaderState(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    UPLOADING = "uploading"


@dataclass
class LocalFile:
    """A file picked or dropped by the user."""

    name: str
    content_type: str
    data: bytes


def _log_alert(message: str) -> None:
    logger.warning(f"Alert: {message}")


class UploaderController:
    def __init__(
        self,
        client: UploadsClient,
        cache: Optional[HistoryCache] = None,
        clipboard: Optional[ClipboardWriter] = None,
        alert: Callable[[str], None] = _log_alert,
        confirm: Callable[[str], bool] = lambda message: True,
        upload_copied_seconds: float = None,
        copy_copied_seconds: float = None,
    ):
        self.client = client
        self.cache = cache
        self.clipboard = clipboard or MemoryClipboard().write_text
        self.alert = alert
        self.confirm = confirm
        self.upload_copied_seconds = (
            settings.UPLOAD_COPIED_SECONDS if upload_copied_seconds is None else upload_copied_seconds
        )
        self.copy_copied_seconds = (
            settings.COPY_COPIED_SECONDS if copy_copied_seconds is None else copy_copied_seconds
        )

        self.state = UploaderState.IDLE
        self.history = UploadHistory()
        self.expanded_index: Optional[int] = None
        self.copied_url: Optional[str] = None

        self._copied_generation = 0
        self._copied_timer: Optional[asyncio.TimerHandle] = None

    @property
    def is_uploading(self) -> bool:
        return self.state == UploaderState.UPLOADING

    async def load(self) -> None:
        """
        Show the cached history, then replace it with the backend listing.
        When the backend is unreachable the cached copy stays on screen.
        """
        if self.cache is not None:
            self.history.replace_all(await self.cache.load())

        try:
            remote = await self.client.list()
        except BackendError as e:
            logger.warning(f"Showing cached history, list failed: {e}")
            return

        self.history.reconcile(remote)
        self._clamp_expanded()
        await self._persist()

    # Drag and drop

    def drag_enter(self) -> None:
        if self.state == UploaderState.IDLE:
            self.state = UploaderState.DRAGGING

    def drag_leave(self) -> None:
        if self.state == UploaderState.DRAGGING:
            self.state = UploaderState.IDLE

    async def drop(self, file: Optional[LocalFile]) -> Optional[UploadRecord]:
        self.drag_leave()
        if file is None:
            return None
        return await self.handle_file(file)

    async def select_file(self, file: Optional[LocalFile]) -> Optional[UploadRecord]:
        if file is None:
            return None
        return await self.handle_file(file)

    async def handle_file(self, file: LocalFile) -> Optional[UploadRecord]:
        if self.is_uploading:
            logger.info(f"Ignoring {file.name}, an upload is already running")
            return None

        if not is_image_content_type(file.content_type):
            self.alert(NOT_AN_IMAGE_MESSAGE)
            return None

        self.state = UploaderState.UPLOADING
        try:
            record = await self.client.upload(file.name, file.data, file.content_type)
        except BackendError as e:
            logger.error(f"Upload error: {e}")
            self.alert(UPLOAD_FAILED_MESSAGE)
            return None
        finally:
            self.state = UploaderState.IDLE

        self.history.prepend(record)
        if self.expanded_index is not None:
            self.expanded_index += 1
        await self._persist()
        await self._copy(record.url, self.upload_copied_seconds)
        return record

    # History entries

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self.history):
            raise IndexError(f"No history entry at index {index}")

    def toggle_expand(self, index: int) -> None:
        self._check_index(index)
        self.expanded_index = None if self.expanded_index == index else index

    async def copy(self, url: str) -> bool:
        return await self._copy(url, self.copy_copied_seconds)

    async def delete(self, index: int) -> bool:
        """
        Delete one entry after confirmation.
        The entry leaves the history only once the backend confirms.
        """
        self._check_index(index)
        record = self.history[index]
        if not self.confirm(CONFIRM_DELETE_MESSAGE):
            return False

        try:
            await self.client.delete(record.url)
        except BackendError as e:
            logger.error(f"Delete error for {record.url}: {e}")
            self.alert(DELETE_FAILED_MESSAGE)
            return False

        self.history.remove(record.url)
        self._shift_expanded_after_removal(index)
        await self._persist()
        return True

    async def delete_all(self) -> Optional[DeleteAllResponse]:
        if not self.confirm(CONFIRM_DELETE_ALL_MESSAGE):
            return None

        try:
            result = await self.client.delete_all()
        except BackendError as e:
            logger.error(f"Delete-all error: {e}")
            self.alert(DELETE_FAILED_MESSAGE)
            return None

        failed = set(result.failed)
        self.history.replace_all(r for r in self.history if r.url in failed)
        self.expanded_index = None
        await self._persist()

        if failed:
            self.alert(f"{len(failed)} screenshot(s) could not be deleted.")
        return result

    # Internals

    async def _copy(self, url: str, visible_seconds: float) -> bool:
        try:
            await write_clipboard(self.clipboard, url)
        except ClipboardError as e:
            logger.warning(str(e))
            return False

        self._show_copied(url, visible_seconds)
        return True

    def _show_copied(self, url: str, visible_seconds: float) -> None:
        if self._copied_timer is not None:
            self._copied_timer.cancel()

        self._copied_generation += 1
        generation = self._copied_generation
        self.copied_url = url
        self._copied_timer = asyncio.get_running_loop().call_later(
            visible_seconds, self._clear_copied, generation
        )

    def _clear_copied(self, generation: int) -> None:
        # A newer copy owns the indicator
        if generation != self._copied_generation:
            return
        self.copied_url = None
        self._copied_timer = None

    def _shift_expanded_after_removal(self, removed_index: int) -> None:
        expanded = self.expanded_index
        if expanded is None or expanded < removed_index:
            return
        if expanded > removed_index:
            self.expanded_index = expanded - 1
        elif removed_index < len(self.history):
            self.expanded_index = removed_index
        elif removed_index > 0:
            self.expanded_index = removed_index - 1
        else:
            self.expanded_index = None

    def _clamp_expanded(self) -> None:
        if self.expanded_index is not None and self.expanded_index >= len(self.history):
            self.expanded_index = None

    async def _persist(self) -> None:
        if self.cache is None:
            return
        try:
            await self.cache.save(self.history)
        except OSError as e:
            logger.warning(f"Could not write history cache {self.cache.path}: {e}")


def create_controller(**kwargs) -> UploaderController:
    """
    Build a controller wired from settings: the service at API_BASE_URL
    and the history cache at HISTORY_CACHE_PATH.
    """
    kwargs.setdefault("cache", HistoryCache(settings.HISTORY_CACHE_PATH))
    return UploaderController(UploadsClient(settings.API_BASE_URL), **kwargs)
