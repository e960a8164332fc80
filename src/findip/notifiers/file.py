"""File notifier: writes the bare IP address to a local file."""

import asyncio
import logging
import os
from pathlib import Path

from findip.config import FileNotifierConfig
from findip.errors import FileOpenFailedError, FileWriteFailedError, FindIpError
from findip.ip_query import IpAddress

logger = logging.getLogger(__name__)


class FileNotifier:
    """Writes the IP address to a file.

    With ``overwrite`` the file is replaced (and created if needed) on every
    notification. Without it the address is appended to an existing file;
    the file is never created in append mode. No delimiter is written, so
    repeated appends produce the addresses back to back.
    """

    def __init__(self, config: FileNotifierConfig):
        self._path = Path(config.file_path)
        self._overwrite = config.overwrite

    @property
    def path(self) -> Path:
        return self._path

    async def notify_success(self, ip: IpAddress) -> bool:
        try:
            await asyncio.to_thread(self._write_sync, str(ip))
        except FindIpError as e:
            logger.error(str(e))
            return False
        logger.info(f"Wrote IP address to {self._path}")
        return True

    async def notify_error(self, error: FindIpError) -> None:
        logger.error(f"IP query failed, {self._path} left untouched: {error}")

    def _write_sync(self, text: str) -> None:
        if self._overwrite:
            try:
                self._path.write_text(text)
            except OSError as e:
                logger.debug(f"Overwrite of {self._path} failed: {e}")
                raise FileWriteFailedError(str(self._path))
            return

        try:
            fd = os.open(self._path, os.O_WRONLY | os.O_APPEND)
        except OSError as e:
            logger.debug(f"Open of {self._path} failed: {e}")
            raise FileOpenFailedError(str(self._path))

        try:
            os.write(fd, text.encode())
        except OSError as e:
            logger.debug(f"Append to {self._path} failed: {e}")
            raise FileWriteFailedError(str(self._path))
        finally:
            os.close(fd)
