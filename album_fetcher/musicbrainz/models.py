"""
Data models for MusicBrainz and Cover Art Archive responses

Only the parts of the WS/2 JSON documents that album-fetcher uses are
modelled. Each model is built with a ``from_api_data()`` factory that
tolerates missing keys and ``null`` values, which MusicBrainz returns freely
for optional fields.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..utils.helpers import format_duration


@dataclass
class Artist:
    id: str = ""
    name: str = ""
    sort_name: str = ""

    @classmethod
    def from_api_data(cls, data: Optional[Dict[str, Any]]) -> 'Artist':
        data = data or {}
        return cls(
            id=data.get('id') or "",
            name=data.get('name') or "",
            sort_name=data.get('sort-name') or ""
        )


@dataclass
class ArtistCredit:
    """One entry of an artist credit: credited name plus join phrase"""
    name: str = ""
    artist: Artist = field(default_factory=Artist)
    join_phrase: str = ""

    @classmethod
    def from_api_data(cls, data: Dict[str, Any]) -> 'ArtistCredit':
        return cls(
            name=data.get('name') or "",
            artist=Artist.from_api_data(data.get('artist')),
            join_phrase=data.get('joinphrase') or ""
        )


@dataclass
class Label:
    id: str = ""
    name: str = ""


@dataclass
class LabelInfo:
    catalog_number: str = ""
    label: Optional[Label] = None

    @classmethod
    def from_api_data(cls, data: Dict[str, Any]) -> 'LabelInfo':
        label_data = data.get('label')
        label = None
        if label_data:
            label = Label(id=label_data.get('id') or "", name=label_data.get('name') or "")
        return cls(catalog_number=data.get('catalog-number') or "", label=label)


@dataclass
class Recording:
    id: str = ""
    title: str = ""
    length: int = 0
    isrcs: List[str] = field(default_factory=list)
    artist_credit: List[ArtistCredit] = field(default_factory=list)

    @classmethod
    def from_api_data(cls, data: Dict[str, Any]) -> 'Recording':
        return cls(
            id=data.get('id') or "",
            title=data.get('title') or "",
            length=data.get('length') or 0,
            isrcs=list(data.get('isrcs') or []),
            artist_credit=[ArtistCredit.from_api_data(c) for c in data.get('artist-credit') or []]
        )


@dataclass
class Track:
    """
    A track on a medium

    ``length`` is in milliseconds; ``number`` is the printed track number,
    which may be non-numeric ("A1").
    """
    id: str = ""
    number: str = ""
    title: str = ""
    length: int = 0
    position: int = 0
    recording: Optional[Recording] = None

    @classmethod
    def from_api_data(cls, data: Dict[str, Any]) -> 'Track':
        recording = data.get('recording')
        return cls(
            id=data.get('id') or "",
            number=data.get('number') or "",
            title=data.get('title') or "",
            length=data.get('length') or 0,
            position=data.get('position') or 0,
            recording=Recording.from_api_data(recording) if recording else None
        )


@dataclass
class Medium:
    """A disc (or other medium) of a release"""
    position: int = 0
    format: str = ""
    tracks: List[Track] = field(default_factory=list)

    @classmethod
    def from_api_data(cls, data: Dict[str, Any]) -> 'Medium':
        return cls(
            position=data.get('position') or 0,
            format=data.get('format') or "",
            tracks=[Track.from_api_data(t) for t in data.get('tracks') or []]
        )


@dataclass
class ReleaseGroup:
    id: str = ""
    title: str = ""
    primary_type: str = ""


@dataclass
class Release:
    """
    A MusicBrainz release (one published edition of an album)

    Search results carry only a subset of these fields; use
    ``MusicBrainzClient.get_release`` for media and recordings.
    """
    id: str
    title: str = ""
    status: str = ""
    date: str = ""
    country: str = ""
    barcode: str = ""
    artist_credit: List[ArtistCredit] = field(default_factory=list)
    label_info: List[LabelInfo] = field(default_factory=list)
    media: List[Medium] = field(default_factory=list)
    release_group: Optional[ReleaseGroup] = None
    score: Optional[int] = None

    @classmethod
    def from_api_data(cls, data: Dict[str, Any]) -> 'Release':
        group = data.get('release-group')
        return cls(
            id=data.get('id') or "",
            title=data.get('title') or "",
            status=data.get('status') or "",
            date=data.get('date') or "",
            country=data.get('country') or "",
            barcode=data.get('barcode') or "",
            artist_credit=[ArtistCredit.from_api_data(c) for c in data.get('artist-credit') or []],
            label_info=[LabelInfo.from_api_data(li) for li in data.get('label-info') or []],
            media=[Medium.from_api_data(m) for m in data.get('media') or []],
            release_group=ReleaseGroup(
                id=group.get('id') or "",
                title=group.get('title') or "",
                primary_type=group.get('primary-type') or ""
            ) if group else None,
            score=data.get('score')
        )

    @property
    def artist_name(self) -> str:
        return get_artist_name(self.artist_credit)

    @property
    def track_count(self) -> int:
        return sum(len(medium.tracks) for medium in self.media)


@dataclass
class SearchResult:
    releases: List[Release] = field(default_factory=list)
    count: int = 0
    offset: int = 0

    @classmethod
    def from_api_data(cls, data: Dict[str, Any]) -> 'SearchResult':
        return cls(
            releases=[Release.from_api_data(r) for r in data.get('releases') or []],
            count=data.get('count') or 0,
            offset=data.get('offset') or 0
        )


@dataclass
class CoverArtImage:
    """
    One image listed by the Cover Art Archive

    ``thumbnails`` maps size keys ("250", "500", "1200", "small", "large")
    to URLs.
    """
    id: int = 0
    image: str = ""
    thumbnails: Dict[str, str] = field(default_factory=dict)
    front: bool = False
    back: bool = False
    types: List[str] = field(default_factory=list)
    approved: bool = False

    @classmethod
    def from_api_data(cls, data: Dict[str, Any]) -> 'CoverArtImage':
        return cls(
            id=data.get('id') or 0,
            image=data.get('image') or "",
            thumbnails={str(k): v for k, v in (data.get('thumbnails') or {}).items() if v},
            front=bool(data.get('front')),
            back=bool(data.get('back')),
            types=list(data.get('types') or []),
            approved=bool(data.get('approved'))
        )


@dataclass
class CoverArt:
    images: List[CoverArtImage] = field(default_factory=list)
    release: str = ""

    @classmethod
    def from_api_data(cls, data: Dict[str, Any]) -> 'CoverArt':
        return cls(
            images=[CoverArtImage.from_api_data(i) for i in data.get('images') or []],
            release=data.get('release') or ""
        )


def get_artist_name(credits: List[ArtistCredit]) -> str:
    """
    Join an artist credit into a display name

    Each entry contributes its credited name (falling back to the artist's
    own name) followed by its join phrase, e.g. "Artist A feat. Artist B".
    """
    return "".join((credit.name or credit.artist.name) + credit.join_phrase for credit in credits)


def format_length(milliseconds: int) -> str:
    """Format a track length in milliseconds as "M:SS", empty when unknown"""
    if not milliseconds or milliseconds <= 0:
        return ""
    return format_duration(milliseconds // 1000)


def extract_year(date: str) -> str:
    """Extract the year from a "YYYY-MM-DD", "YYYY-MM" or "YYYY" date"""
    return date[:4] if len(date) >= 4 else date
