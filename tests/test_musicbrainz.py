"""Test the MusicBrainz client, models and conversion"""

from unittest.mock import Mock, patch

import pytest
import requests

from album_fetcher.musicbrainz.client import RELEASE_INCLUDES, MusicBrainzClient
from album_fetcher.musicbrainz.converter import to_playlist_metadata
from album_fetcher.musicbrainz.lookup import lookup_playlist_metadata
from album_fetcher.musicbrainz.models import (
    ArtistCredit,
    Artist,
    Release,
    SearchResult,
    extract_year,
    format_length,
    get_artist_name,
)
from album_fetcher.utils.exceptions import MusicBrainzError, NotFoundError, ValidationError

from conftest import make_response


RELEASE_ID = 'f1c2d3e4-0000-4000-8000-000000000001'


@pytest.fixture
def session():
    return Mock(spec=requests.Session, headers={})


@pytest.fixture
def client(session):
    return MusicBrainzClient(session=session, user_agent="album-fetcher-tests/1.0", rate_limit_delay=0)


class TestModels:
    """Test parsing of API documents"""

    def test_release_from_api_data(self, sample_release_data):
        """Test parsing a full release"""
        release = Release.from_api_data(sample_release_data)

        assert release.id == RELEASE_ID
        assert release.artist_name == "Black Kids"
        assert release.label_info[0].label.name == "Almost Gold"
        assert release.release_group.primary_type == "Album"
        assert release.track_count == 3
        assert release.media[0].tracks[2].recording is None
        assert release.media[0].tracks[2].length == 0

    def test_missing_fields(self):
        """Test missing fields"""
        release = Release.from_api_data({'id': 'x', 'media': None, 'label-info': [{'label': None}]})

        assert release.title == ""
        assert release.media == []
        assert release.label_info[0].label is None
        assert release.release_group is None

    def test_get_artist_name(self):
        """Test get artist name"""
        credits = [
            ArtistCredit(name="A", join_phrase=" & "),
            ArtistCredit(name="", artist=Artist(name="B"), join_phrase=" feat. "),
            ArtistCredit(name="C"),
        ]
        assert get_artist_name(credits) == "A & B feat. C"
        assert get_artist_name([]) == ""

    def test_format_length(self):
        """Test format length"""
        assert format_length(215000) == "3:35"
        assert format_length(59999) == "0:59"
        assert format_length(0) == ""
        assert format_length(-5) == ""

    def test_extract_year(self):
        """Test extract year"""
        assert extract_year("2008-07-08") == "2008"
        assert extract_year("2008") == "2008"
        assert extract_year("20") == "20"
        assert extract_year("") == ""


class TestClient:
    """Test HTTP behaviour of MusicBrainzClient"""

    def test_headers(self, client, session):
        """Test session headers"""
        assert session.headers['User-Agent'] == "album-fetcher-tests/1.0"
        assert session.headers['Accept'] == "application/json"

    def test_get_release(self, client, session, sample_release_data):
        """Test get release"""
        session.get.return_value = make_response(200, sample_release_data)

        release = client.get_release(RELEASE_ID)

        assert release.title == "Partie Traumatic"
        session.get.assert_called_once_with(
            f"https://musicbrainz.org/ws/2/release/{RELEASE_ID}",
            params={'inc': RELEASE_INCLUDES, 'fmt': 'json'},
            timeout=30
        )

    def test_not_found(self, client, session):
        """Test HTTP 404 raises NotFoundError"""
        session.get.return_value = make_response(404, text='{"error": "Not Found"}')

        with pytest.raises(NotFoundError) as exc_info:
            client.get_release("missing")

        assert exc_info.value.status_code == 404

    def test_server_error(self, client, session):
        """Test server error"""
        session.get.return_value = make_response(503, text="Service Unavailable")

        with pytest.raises(MusicBrainzError) as exc_info:
            client.get_release(RELEASE_ID)

        assert not isinstance(exc_info.value, NotFoundError)
        assert exc_info.value.status_code == 503
        assert exc_info.value.body == "Service Unavailable"
        assert "status 503" in str(exc_info.value)

    def test_transport_error(self, client, session):
        """Test transport error"""
        session.get.side_effect = requests.Timeout("read timed out")

        with pytest.raises(MusicBrainzError, match="read timed out"):
            client.get_release(RELEASE_ID)

    def test_invalid_json(self, client, session):
        """Test an undecodable body"""
        session.get.return_value = make_response(200, ValueError("Expecting value"), text="<html>")

        with pytest.raises(MusicBrainzError, match="parse response"):
            client.get_release(RELEASE_ID)

    @pytest.mark.parametrize("body", [None, [], "text", 42])
    def test_non_object_body(self, client, session, body):
        """Test a 200 response that is not a JSON object raises MusicBrainzError"""
        session.get.return_value = make_response(200, body, text="null")

        with pytest.raises(MusicBrainzError, match="expected a JSON object"):
            client.get_release(RELEASE_ID)

    def test_non_object_search_and_cover_bodies(self, client, session):
        """Test search and cover art lookups reject non-object bodies"""
        session.get.return_value = make_response(200, [{'id': 'r1'}])

        with pytest.raises(MusicBrainzError):
            client.search_releases("x")
        with pytest.raises(MusicBrainzError):
            client.get_front_cover_url(RELEASE_ID)

    def test_search_by_artist_and_album(self, client, session):
        """Test search by artist and album"""
        session.get.return_value = make_response(200, {'releases': [{'id': 'r1', 'title': 'X'}], 'count': 1})

        result = client.search_by_artist_and_album("Black Kids", 'Partie "Traumatic"')

        assert [r.id for r in result.releases] == ['r1']
        params = session.get.call_args.kwargs['params']
        assert params['query'] == 'artist:"Black Kids" AND release:"Partie \\"Traumatic\\""'
        assert params['limit'] == 10

    def test_auto_search_splits_artist_and_album(self, client, session):
        """Test auto search splits artist and album"""
        session.get.return_value = make_response(200, {'releases': []})

        client.auto_search("Motion City Soundtrack - Commit This to Memory")

        query = session.get.call_args.kwargs['params']['query']
        assert query == 'artist:"Motion City Soundtrack" AND release:"Commit This to Memory"'

    def test_auto_search_free_text(self, client, session):
        """Test auto search free text"""
        session.get.return_value = make_response(200, {'releases': []})

        client.auto_search("Commit This to Memory")

        assert session.get.call_args.kwargs['params']['query'] == "Commit This to Memory"

    def test_search_limit_default(self, client, session):
        """Test search limit default"""
        session.get.return_value = make_response(200, {'releases': []})

        client.search_releases("x", limit=0)

        assert session.get.call_args.kwargs['params']['limit'] == 10

    def test_front_cover_url(self, client, session, sample_cover_art_data):
        """Test front cover url"""
        session.get.return_value = make_response(200, sample_cover_art_data)

        url = client.get_front_cover_url(RELEASE_ID)

        assert url == "https://coverartarchive.org/release/x/2-1200.jpg"
        assert session.get.call_args.args[0] == f"https://coverartarchive.org/release/{RELEASE_ID}"

    def test_front_cover_prefers_500_over_full(self, client, session):
        """Test front cover prefers 500 over full"""
        images = [{'front': True, 'image': 'full.jpg', 'thumbnails': {'500': '500.jpg', '250': '250.jpg'}}]
        session.get.return_value = make_response(200, {'images': images})

        assert client.get_front_cover_url(RELEASE_ID) == "500.jpg"

    def test_first_image_without_front(self, client, session):
        """Test first image without front"""
        images = [
            {'front': False, 'image': 'first.jpg', 'thumbnails': {'500': 'first-500.jpg'}},
            {'front': False, 'image': 'second.jpg', 'thumbnails': {'1200': 'second-1200.jpg'}},
        ]
        session.get.return_value = make_response(200, {'images': images})

        assert client.get_front_cover_url(RELEASE_ID) == "first.jpg"

    def test_no_cover_art(self, client, session):
        """Test no cover art"""
        session.get.return_value = make_response(200, {'images': []})

        with pytest.raises(NotFoundError):
            client.get_front_cover_url(RELEASE_ID)


class TestRateLimit:
    """Test request spacing"""

    def test_first_request_does_not_wait(self, session):
        """Test first request does not wait"""
        client = MusicBrainzClient(session=session, rate_limit_delay=1.0)
        with patch('album_fetcher.musicbrainz.client.time') as mock_time:
            mock_time.monotonic.return_value = 100.0
            client._rate_limit()

        mock_time.sleep.assert_not_called()
        assert client.last_request_time == 100.0

    def test_waits_for_remaining_interval(self, session):
        """Test waits for remaining interval"""
        client = MusicBrainzClient(session=session, rate_limit_delay=1.0)
        client.last_request_time = 100.0
        with patch('album_fetcher.musicbrainz.client.time') as mock_time:
            mock_time.monotonic.side_effect = [100.25, 101.0]
            client._rate_limit()

        mock_time.sleep.assert_called_once_with(pytest.approx(0.75))
        assert client.last_request_time == 101.0

    def test_no_wait_after_interval(self, session):
        """Test no wait after interval"""
        client = MusicBrainzClient(session=session, rate_limit_delay=1.0)
        client.last_request_time = 100.0
        with patch('album_fetcher.musicbrainz.client.time') as mock_time:
            mock_time.monotonic.side_effect = [102.0, 102.0]
            client._rate_limit()

        mock_time.sleep.assert_not_called()

    def test_clients_do_not_share_state(self, session):
        """Test clients do not share state"""
        first = MusicBrainzClient(session=session, rate_limit_delay=1.0)
        second = MusicBrainzClient(session=session, rate_limit_delay=1.0)
        first.last_request_time = 100.0

        with patch('album_fetcher.musicbrainz.client.time') as mock_time:
            mock_time.monotonic.return_value = 100.1
            second._rate_limit()

        mock_time.sleep.assert_not_called()


class TestConverter:
    """Test release to playlist metadata conversion"""

    def test_album_fields(self, sample_release_data):
        """Test album fields"""
        metadata = to_playlist_metadata(Release.from_api_data(sample_release_data), "https://caa/front.jpg")
        album = metadata.album

        assert album.title == "Partie Traumatic"
        assert album.artist == "Black Kids"
        assert album.album_artist == "Black Kids"
        assert album.year == "2008"
        assert album.label == "Almost Gold"
        assert album.catalog_number == "B0011532-02"
        assert album.country == "US"
        assert album.total_tracks == 3
        assert album.cover == "https://caa/front.jpg"

    def test_tracks(self, sample_release_data):
        """Test track conversion"""
        tracks = to_playlist_metadata(Release.from_api_data(sample_release_data)).tracks

        assert [t.position for t in tracks] == [1, 2, 3]
        assert tracks[0].title == "Hit the Heartbrakes"
        assert tracks[0].isrc == "USUM70812345"
        assert tracks[0].artist == ""
        assert tracks[0].duration == "3:35"
        assert tracks[1].title == "Partie Traumatic (album version)"
        assert tracks[1].artist == "Black Kids feat. Guest"
        assert tracks[1].isrc == ""
        assert tracks[2].title == "Hurricane Jane"
        assert tracks[2].duration == ""
        assert all(t.disc_number == 0 and t.total_discs == 0 for t in tracks)

    def test_multi_disc_numbering(self):
        """Test multi disc numbering"""
        release = Release.from_api_data({
            'id': 'r',
            'media': [
                {'position': 1, 'tracks': [{'title': 'A'}, {'title': 'B'}]},
                {'position': 2, 'tracks': [{'title': 'C'}]},
            ]
        })

        tracks = to_playlist_metadata(release).tracks

        assert [(t.position, t.disc_number, t.total_discs) for t in tracks] == [(1, 1, 2), (2, 1, 2), (3, 2, 2)]

    def test_empty_release(self):
        """Test empty release"""
        metadata = to_playlist_metadata(Release(id='r'))
        assert metadata.tracks == ()
        assert metadata.album.total_tracks == 0


class TestLookup:
    """Test release lookup"""

    def setup_method(self):
        self.client = Mock(spec=MusicBrainzClient)

    def test_lookup_by_id(self, sample_release_data):
        """Test lookup by id"""
        self.client.get_release.return_value = Release.from_api_data(sample_release_data)
        self.client.get_front_cover_url.return_value = "https://caa/front.jpg"

        metadata = lookup_playlist_metadata(self.client, musicbrainz_id=RELEASE_ID)

        self.client.get_release.assert_called_once_with(RELEASE_ID)
        self.client.auto_search.assert_not_called()
        assert metadata.album.cover == "https://caa/front.jpg"
        assert len(metadata.tracks) == 3

    def test_lookup_by_query(self, sample_release_data):
        """Test lookup by query"""
        self.client.auto_search.return_value = SearchResult(releases=[Release(id='best'), Release(id='other')])
        self.client.get_release.return_value = Release.from_api_data(sample_release_data)
        self.client.get_front_cover_url.return_value = ""

        lookup_playlist_metadata(self.client, query="Black Kids - Partie Traumatic")

        self.client.auto_search.assert_called_once_with("Black Kids - Partie Traumatic")
        self.client.get_release.assert_called_once_with('best')

    def test_no_search_results(self):
        """Test no search results"""
        self.client.auto_search.return_value = SearchResult()

        with pytest.raises(NotFoundError):
            lookup_playlist_metadata(self.client, query="Nobody - Nothing")

    def test_cover_failure_is_tolerated(self, sample_release_data):
        """Test cover failure is tolerated"""
        self.client.get_release.return_value = Release.from_api_data(sample_release_data)
        self.client.get_front_cover_url.side_effect = NotFoundError("no cover art found")

        metadata = lookup_playlist_metadata(self.client, musicbrainz_id=RELEASE_ID)

        assert metadata.album.cover == ""

    def test_requires_id_or_query(self):
        """Test requires id or query"""
        with pytest.raises(ValidationError):
            lookup_playlist_metadata(self.client)
