"""
MusicBrainz and Cover Art Archive API client

Release lookups and searches go to the MusicBrainz WS/2 JSON API; cover
images are listed by the Cover Art Archive. Both services ask clients to
identify themselves with a descriptive User-Agent and MusicBrainz limits
anonymous clients to about one request per second.

Rate limiting is tracked per client instance: each client remembers when
it last issued a request and sleeps for the remainder of the configured
interval before the next one. Two clients never throttle each other.

Errors:
- HTTP 404 raises NotFoundError
- Any other status >= 400 raises MusicBrainzError with status_code and body
- Transport failures and undecodable JSON raise MusicBrainzError

There are no retries; callers decide whether a failed lookup is fatal.
"""

import time
from typing import Any, Dict, Optional
from urllib.parse import quote

import requests

from ..config.settings import NetworkConfig
from ..utils.exceptions import MusicBrainzError, NotFoundError
from ..utils.logger import get_logger
from .models import CoverArt, Release, SearchResult


RELEASE_INCLUDES = "artist-credits+labels+recordings+release-groups+isrcs"
DEFAULT_SEARCH_LIMIT = 10


class MusicBrainzClient:
    """
    Rate-limited client for MusicBrainz release data and cover art

    Attributes:
        base_url: MusicBrainz WS/2 root
        coverart_url: Cover Art Archive root
        timeout: Request timeout in seconds
        min_request_interval: Minimum seconds between two requests
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        user_agent: Optional[str] = None,
        base_url: Optional[str] = None,
        coverart_url: Optional[str] = None,
        timeout: Optional[int] = None,
        rate_limit_delay: Optional[float] = None
    ):
        defaults = NetworkConfig()
        self.base_url = (base_url or defaults.musicbrainz_url).rstrip('/')
        self.coverart_url = (coverart_url or defaults.coverart_url).rstrip('/')
        self.timeout = timeout if timeout is not None else defaults.request_timeout
        self.min_request_interval = rate_limit_delay if rate_limit_delay is not None else defaults.rate_limit_delay

        # Rate limiting
        self.last_request_time: Optional[float] = None

        self.session = session or requests.Session()
        self.session.headers.update({
            'User-Agent': user_agent or defaults.user_agent,
            'Accept': 'application/json'
        })

        self.logger = get_logger(__name__)

    @classmethod
    def from_settings(cls, network: NetworkConfig) -> 'MusicBrainzClient':
        """Create a client from the ``network`` settings section"""
        return cls(
            user_agent=network.user_agent,
            base_url=network.musicbrainz_url,
            coverart_url=network.coverart_url,
            timeout=network.request_timeout,
            rate_limit_delay=network.rate_limit_delay
        )

    def _rate_limit(self) -> None:
        """Wait until the minimum interval since the last request has passed"""
        if self.last_request_time is not None:
            time_since_last = time.monotonic() - self.last_request_time
            if time_since_last < self.min_request_interval:
                time.sleep(self.min_request_interval - time_since_last)

        self.last_request_time = time.monotonic()

    def _get_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Issue a rate-limited GET request and decode the JSON body

        Raises:
            NotFoundError: On HTTP 404
            MusicBrainzError: On other HTTP errors, transport errors or bad JSON
        """
        self._rate_limit()
        self.logger.debug(f"GET {url} {params or ''}")

        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise MusicBrainzError(f"request failed: {e}", details={'url': url, 'original_error': e}) from e

        if response.status_code == 404:
            raise NotFoundError("not found", status_code=404, body=response.text, details={'url': url})
        if response.status_code >= 400:
            raise MusicBrainzError(
                f"API error: status {response.status_code}: {response.text}",
                status_code=response.status_code,
                body=response.text,
                details={'url': url}
            )

        try:
            data = response.json()
        except ValueError as e:
            raise MusicBrainzError(f"parse response: {e}", body=response.text, details={'url': url}) from e

        if not isinstance(data, dict):
            raise MusicBrainzError(
                f"parse response: expected a JSON object, got {type(data).__name__}",
                body=response.text,
                details={'url': url}
            )
        return data

    def get_release(self, mbid: str) -> Release:
        """
        Fetch a release with artist credits, labels, recordings and ISRCs

        Args:
            mbid: MusicBrainz release ID

        Returns:
            Release including its media and tracks
        """
        url = f"{self.base_url}/release/{quote(mbid, safe='')}"
        data = self._get_json(url, {'inc': RELEASE_INCLUDES, 'fmt': 'json'})
        return Release.from_api_data(data)

    def search_releases(self, query: str, limit: int = DEFAULT_SEARCH_LIMIT) -> SearchResult:
        """
        Search releases with a Lucene query

        Args:
            query: Query such as ``artist:"Name" AND release:"Album"``
            limit: Maximum number of results; non-positive means the default

        Returns:
            Search results, best match first
        """
        if limit <= 0:
            limit = DEFAULT_SEARCH_LIMIT

        data = self._get_json(f"{self.base_url}/release", {'query': query, 'limit': limit, 'fmt': 'json'})
        result = SearchResult.from_api_data(data)
        self.logger.debug(f"Search '{query}' returned {len(result.releases)} of {result.count} release(s)")
        return result

    def search_by_artist_and_album(self, artist: str, album: str) -> SearchResult:
        """Search releases by artist and album name"""
        query = f'artist:"{_escape_phrase(artist)}" AND release:"{_escape_phrase(album)}"'
        return self.search_releases(query, DEFAULT_SEARCH_LIMIT)

    def auto_search(self, query: str) -> SearchResult:
        """
        Search with a free-form "Artist - Album" string

        The query is split on its first " - "; when there is none it is
        used as a plain search query.
        """
        artist, separator, album = query.partition(" - ")
        if separator:
            return self.search_by_artist_and_album(artist.strip(), album.strip())
        return self.search_releases(query, DEFAULT_SEARCH_LIMIT)

    def get_cover_art(self, release_id: str) -> CoverArt:
        """List the Cover Art Archive images of a release"""
        url = f"{self.coverart_url}/release/{quote(release_id, safe='')}"
        return CoverArt.from_api_data(self._get_json(url))

    def get_front_cover_url(self, release_id: str) -> str:
        """
        Return the best front cover image URL of a release

        The image flagged as front is preferred, using its 1200px thumbnail,
        then the 500px one, then the full image. Without a front image the
        first image is used (1200px thumbnail, else full image).

        Raises:
            NotFoundError: If the release has no cover art
        """
        cover_art = self.get_cover_art(release_id)

        for image in cover_art.images:
            if image.front:
                url = image.thumbnails.get('1200') or image.thumbnails.get('500') or image.image
                if url:
                    return url

        if cover_art.images:
            image = cover_art.images[0]
            url = image.thumbnails.get('1200') or image.image
            if url:
                return url

        raise NotFoundError("no cover art found", details={'release_id': release_id})


def _escape_phrase(value: str) -> str:
    """Escape a value for use inside a quoted Lucene phrase"""
    return value.replace('\\', '\\\\').replace('"', '\\"')
