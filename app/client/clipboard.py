from typing import Awaitable, Callable, Optional

from app.core.exceptions import ClipboardError

ClipboardWriter = Callable[[str], Awaitable[None]]


class MemoryClipboard:
    """In-process clipboard, also used as the default when no system one is wired."""

    def __init__(self):
        self._text: Optional[str] = None

    async def write_text(self, text: str) -> None:
        self._text = text

    def read_text(self) -> Optional[str]:
        return self._text


async def write_clipboard(writer: ClipboardWriter, text: str) -> None:
    """
    Write `text` through `writer`, raising ClipboardError on any failure.
    """
    try:
        await writer(text)
    except Exception as e:
        raise ClipboardError(f"Clipboard write failed: {e}") from e
