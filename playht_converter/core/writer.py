"""Stream a remote audio file to local disk.

WHY: The finished MP3 lives at a URL play.ht hands back; the pipeline's
result is that file on disk. Streaming keeps memory flat for long audio.

HOW: ArtifactWriter opens the destination in binary mode and copies chunks
from Transport.get_stream() into it. The file handle is scoped with a
``with`` block, and any failure removes the partial file before the error
propagates.

RULES:
- Bytes are written exactly as received (no transcoding)
- Parent directories are created as needed
- An existing file at the path is overwritten
- On failure the partial file is deleted, then the error re-raised
- OSError while writing becomes WriteError; TransportError passes through
"""

from __future__ import annotations

import logging
from pathlib import Path

from playht_converter.api.transport import Transport
from playht_converter.errors import WriteError

logger = logging.getLogger(__name__)


class ArtifactWriter:
    """Saves a downloadable resource to a local path."""

    def __init__(self, transport: Transport) -> None:
        self._transport = transport

    async def save(self, url: str, path: Path | str) -> Path:
        """Download url into path and return the path.

        Args:
            url: Source URL (fetched without authorization).
            path: Destination file path.

        Returns:
            The destination Path once the stream has been fully written.
        """
        path = Path(path)
        written = 0
        opened = False
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            async with self._transport.get_stream(url) as chunks:
                with open(path, "wb") as f:
                    opened = True
                    async for chunk in chunks:
                        f.write(chunk)
                        written += len(chunk)
        except OSError as e:
            if opened:
                _remove_partial(path)
            raise WriteError(path, e) from e
        except BaseException:
            if opened:
                _remove_partial(path)
            raise

        logger.info("Saved %d bytes from %s to %s", written, url, path)
        return path


def _remove_partial(path: Path) -> None:
    """Delete a partially written file, if one was created."""
    try:
        path.unlink()
    except FileNotFoundError:
        return
    except OSError:
        logger.warning("Could not remove partial file %s", path)
        return
    logger.warning("Removed partial file %s", path)
