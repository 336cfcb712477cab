"""Per-station blob storage for streamer broadcast recordings.

Recordings live under ``STATIONS_DIR/<short_name>/recordings``. Paths stored
on ``StationStreamerBroadcast.recording_path`` are relative to that root.
"""

import mimetypes
from pathlib import Path
from typing import BinaryIO, Dict, Iterator, Optional, Union

from loguru import logger

from stationdesk.core.config import settings
from stationdesk.core.errors import NotFound, SourceUnavailable
from stationdesk.core.models import Station

DEFAULT_MIMETYPE = "application/octet-stream"
CHUNK_SIZE = 64 * 1024


class RecordingStorage:
    """Filesystem-backed recordings store rooted at one directory."""

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)

    @classmethod
    def for_station(
        cls, station: Station, base_dir: Optional[Path] = None
    ) -> "RecordingStorage":
        base = base_dir or settings.STATIONS_DIR
        return cls(base / station.short_name / "recordings")

    def _resolve(self, path: str) -> Path:
        root = self.root.resolve()
        full = (root / path).resolve()
        if not full.is_relative_to(root):
            raise NotFound(f"Recording path '{path}' is outside storage.")
        return full

    def exists(self, path: str) -> bool:
        return self._resolve(path).is_file()

    def read_stream(self, path: str) -> BinaryIO:
        """Open a recording for reading. The caller closes the handle."""
        full = self._resolve(path)
        try:
            return full.open("rb")
        except OSError as e:
            logger.error(f"Could not open recording {full}: {e}")
            raise SourceUnavailable(f"Recording file '{path}' could not be read.")

    def get_metadata(self, path: str) -> Dict[str, Union[str, int, float]]:
        full = self._resolve(path)
        try:
            stat = full.stat()
        except OSError as e:
            logger.error(f"Could not stat recording {full}: {e}")
            raise SourceUnavailable(f"Recording file '{path}' could not be read.")
        return {"path": path, "size": stat.st_size, "mtime": stat.st_mtime}

    def get_mimetype(self, path: str) -> str:
        """Guess the mimetype from the file name.

        Raises:
            ValueError: The type cannot be determined.
        """
        mime, _ = mimetypes.guess_type(self._resolve(path).name)
        if mime is None:
            raise ValueError(f"Unknown mimetype for '{path}'")
        return mime

    def delete(self, path: str) -> None:
        """Remove a recording.

        Raises:
            FileNotFoundError: Nothing is stored at ``path``.
        """
        full = self._resolve(path)
        full.unlink()
        logger.info(f"Deleted recording {full}")


def mimetype_or_default(storage: RecordingStorage, path: str) -> str:
    """Best-effort mimetype lookup."""
    try:
        return storage.get_mimetype(path)
    except ValueError:
        return DEFAULT_MIMETYPE


def iter_file(handle: BinaryIO, chunk_size: int = CHUNK_SIZE) -> Iterator[bytes]:
    """Yield a file's contents in chunks, closing it when exhausted."""
    try:
        while True:
            chunk = handle.read(chunk_size)
            if not chunk:
                break
            yield chunk
    finally:
        handle.close()
