"""
Cover art resolution for tagging

A cover source is either a local image file or a URL. Local files are only
checked for existence and used in place. URLs are downloaded into a
temporary file that exists for the duration of a ``with`` block and is
removed on every exit path, including errors raised inside the block.

Downloaded images go through the same preparation as embedded album art
elsewhere in the application: converted to RGB JPEG and limited to
1000x1000 pixels with Pillow. Data Pillow cannot decode is kept as-is.
"""

import os
import tempfile
from contextlib import contextmanager
from io import BytesIO
from typing import Iterator, Optional

import requests
from PIL import Image

from ..utils.exceptions import CoverError
from ..utils.helpers import is_valid_url
from ..utils.logger import get_logger


MAX_COVER_SIZE = (1000, 1000)


class CoverResolver:
    """
    Turn a cover source into a local file path usable by the tagger

    Attributes:
        session: requests session used for downloads
        timeout: Request timeout in seconds
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: int = 30,
        user_agent: Optional[str] = None
    ):
        self.session = session or requests.Session()
        if user_agent:
            self.session.headers['User-Agent'] = user_agent
        self.timeout = timeout
        self.logger = get_logger(__name__)

    @contextmanager
    def prepare(self, source: Optional[str]) -> Iterator[Optional[str]]:
        """
        Resolve ``source`` to a local image path for the duration of the block

        Args:
            source: Local path, URL, or empty for no cover

        Yields:
            Path to the image, or None when ``source`` is empty

        Raises:
            CoverError: If a local file does not exist or a download fails
        """
        if not source or not source.strip():
            yield None
            return

        source = source.strip()
        if not is_valid_url(source):
            path = os.path.expanduser(source)
            if not os.path.isfile(path):
                raise CoverError(f"cover file: not found: {path}", details={'path': path})
            yield path
            return

        temp_path = self._download(source)
        try:
            yield temp_path
        finally:
            try:
                os.remove(temp_path)
            except FileNotFoundError:
                pass
            self.logger.debug(f"Removed temporary cover {temp_path}")

    def _download(self, url: str) -> str:
        """Download ``url`` into a new temporary file and return its path"""
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise CoverError(f"download cover: {e}", details={'url': url, 'original_error': e}) from e

        if response.status_code >= 300:
            raise CoverError(
                f"download cover: unexpected status {response.status_code}",
                details={'url': url, 'status_code': response.status_code}
            )

        data = self._prepare_image(response.content)

        fd, temp_path = tempfile.mkstemp(prefix="album-fetcher-cover-", suffix=".jpg")
        try:
            with os.fdopen(fd, 'wb') as f:
                f.write(data)
        except OSError as e:
            os.remove(temp_path)
            raise CoverError(f"write cover: {e}", details={'path': temp_path}) from e

        self.logger.debug(f"Downloaded cover {url} -> {temp_path} ({len(data)} bytes)")
        return temp_path

    def _prepare_image(self, image_data: bytes) -> bytes:
        """Convert image data to an embeddable JPEG, keeping undecodable bytes as-is"""
        try:
            with Image.open(BytesIO(image_data)) as img:
                if img.mode != 'RGB':
                    img = img.convert('RGB')

                if img.width > MAX_COVER_SIZE[0] or img.height > MAX_COVER_SIZE[1]:
                    img.thumbnail(MAX_COVER_SIZE, Image.Resampling.LANCZOS)

                output = BytesIO()
                img.save(output, format='JPEG', quality=90, optimize=True)
                return output.getvalue()
        except Image.DecompressionBombError as e:
            raise CoverError(f"cover image too large: {e}") from e
        except (OSError, ValueError) as e:
            self.logger.debug(f"Keeping cover image unprocessed: {e}")
            return image_data
