"""Flat-directory content store for uploaded files"""
from pathlib import Path
from starlette.concurrency import run_in_threadpool
import logging
import secrets
import time

logger = logging.getLogger(__name__)

PUBLIC_PREFIX = "/uploads"


class FileStorage:
    """
    Stores files under a single directory and hands back their public URL.

    Names are chosen by the caller; generate_filename() gives a
    collision-resistant one.
    """

    def __init__(self, directory: str):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def generate_filename(prefix: str, extension: str) -> str:
        """<prefix>-<epoch ms>-<random><extension>"""
        return f"{prefix}-{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{extension}"

    def url_for(self, filename: str) -> str:
        return f"{PUBLIC_PREFIX}/{filename}"

    def path_for(self, filename: str) -> Path:
        return self.directory / filename

    async def save(self, filename: str, content: bytes) -> str:
        """
        Write content under filename.

        Returns:
            Public URL of the stored file
        """
        path = self.path_for(filename)
        await run_in_threadpool(path.write_bytes, content)
        logger.info(f"Stored upload {filename} ({len(content)} bytes)")
        return self.url_for(filename)
