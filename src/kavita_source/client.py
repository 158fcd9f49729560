"""Kavita API client implementing the host's novel-source operations."""

import logging
from typing import Any

import httpx

from kavita_source import __version__
from kavita_source.chapters import flatten
from kavita_source.exceptions import AuthenticationError, ParseError
from kavita_source.models import (
    ChapterItem,
    ChapterPath,
    ContentNode,
    FilterComparison,
    FilterField,
    Format,
    NovelItem,
    NovelPath,
    NovelStatus,
    PublicationStatus,
    SourceNovel,
)
from kavita_source.session import SessionManager

logger = logging.getLogger(__name__)

PLUGIN_ID = "kavita"
PLUGIN_NAME = "Kavita"
VERSION = __version__

PAGE_SIZE = 20
SORT_BY_NAME = 1

PLUGIN_SETTINGS = {
    "url": {
        "value": "",
        "label": "URL",
        "type": "Text",
    },
    "apiKey": {
        "value": "",
        "label": "Api Key",
        "type": "Text",
    },
}

STATUS_MAP = {
    PublicationStatus.ONGOING: NovelStatus.ONGOING,
    PublicationStatus.HIATUS: NovelStatus.ON_HIATUS,
    PublicationStatus.COMPLETED: NovelStatus.COMPLETED,
    PublicationStatus.CANCELLED: NovelStatus.CANCELLED,
    PublicationStatus.ENDED: NovelStatus.PUBLISHING_FINISHED,
}


def build_filter(search_term: str | None = None) -> dict[str, Any]:
    """Build a series filter for EPUB books, optionally matching a series name."""
    statements = [
        {
            "comparison": FilterComparison.CONTAINS.value,
            "field": FilterField.FORMATS.value,
            "value": Format.EPUB.value,
        },
    ]
    if search_term is not None:
        statements.append(
            {
                "comparison": FilterComparison.MATCHES.value,
                "field": FilterField.SERIES_NAME.value,
                "value": search_term,
            }
        )

    return {
        "id": 0,
        "name": "",
        "statements": statements,
        # 1 = all statements must match
        "combinations": 1,
        "sortOptions": {
            "sortField": SORT_BY_NAME,
            "isAscending": True,
        },
        "limitTo": 0,
    }


def convert_publication_status(status: Any) -> str:
    """Map Kavita's publication status onto the host's status strings."""
    try:
        return STATUS_MAP[PublicationStatus(status)].value
    except (ValueError, KeyError):
        return NovelStatus.UNKNOWN.value


def _join_names(people: list[dict[str, Any]] | None, key: str = "name") -> str:
    return ", ".join(p[key] for p in people or [] if p.get(key))


class KavitaClient:
    """Client for browsing and reading EPUB series on a Kavita server."""

    def __init__(
        self,
        session: SessionManager | None = None,
        transport: httpx.Client | None = None,
    ) -> None:
        self._client = transport or httpx.Client(timeout=30.0)
        self._session = session or SessionManager(transport=self._client)

    def _check_response_auth(self, response: httpx.Response) -> None:
        if response.status_code == 401:
            raise AuthenticationError("Kavita rejected the session token")

    def _get(self, path: str, params: dict[str, Any] | None = None) -> httpx.Response:
        response = self._client.get(
            f"{self._session.base_url}{path}",
            params=params,
            headers=self._session.get_authorized_headers(),
        )
        self._check_response_auth(response)
        response.raise_for_status()
        return response

    def _get_json(self, path: str, failure: str, params: dict[str, Any] | None = None) -> Any:
        response = self._get(path, params)
        try:
            return response.json()
        except ValueError as e:
            raise ParseError(failure) from e

    def cover_url(self, chapter_id: int | str) -> str:
        """Image URL for a chapter cover; the key rides in the query string."""
        return (
            f"{self._session.base_url}api/Image/chapter-cover"
            f"?chapterId={chapter_id}&apiKey={self._session.api_key}"
        )

    def _novels_by_filter(self, request_filter: dict[str, Any], page_no: int) -> list[NovelItem]:
        response = self._client.post(
            f"{self._session.base_url}api/series/all-v2",
            params={"pageNumber": page_no, "pageSize": PAGE_SIZE},
            json=request_filter,
            headers=self._session.get_authorized_headers({"Content-Type": "application/json"}),
        )
        self._check_response_auth(response)
        response.raise_for_status()

        try:
            series_list = response.json()
        except ValueError as e:
            raise ParseError("Failed to load novel series from kavita.") from e
        if not isinstance(series_list, list):
            raise ParseError("Failed to load novel series from kavita.")

        novels: list[NovelItem] = []
        for series in series_list:
            try:
                series_id = str(series["id"])
                library_id = str(series["libraryId"])
            except (KeyError, TypeError) as e:
                raise ParseError("Failed to load novel series from kavita.") from e

            detail = self._get_json(
                "api/series/series-detail",
                "Failed to load novel series detail from kavita.",
                params={"seriesId": series_id},
            )
            if not isinstance(detail, dict):
                raise ParseError("Failed to load novel series detail from kavita.")

            try:
                for volume in detail.get("volumes") or []:
                    for chapter in volume.get("chapters") or []:
                        novels.append(
                            NovelItem(
                                name=chapter.get("titleName") or "",
                                path=str(NovelPath(library_id, series_id, str(chapter["id"]))),
                                cover=self.cover_url(chapter["id"]),
                            )
                        )
            except (AttributeError, KeyError, TypeError) as e:
                raise ParseError("Failed to load novel series detail from kavita.") from e

        logger.debug("Loaded %d novels from %d series", len(novels), len(series_list))
        return novels

    def list_novels(self, page_no: int = 1) -> list[NovelItem]:
        """List EPUB novels on the given page of the library."""
        return self._novels_by_filter(build_filter(), page_no)

    def search_novels(self, term: str, page_no: int = 1) -> list[NovelItem]:
        """List EPUB novels whose series name matches term."""
        return self._novels_by_filter(build_filter(term), page_no)

    def get_detail(self, path: str) -> SourceNovel:
        """Fetch novel metadata and its flattened chapter list."""
        novel_path = NovelPath.parse(path)
        novel = SourceNovel(path=path)

        data = self._get_json(
            "api/Chapter",
            "Failed to load novel from kavita.",
            params={"chapterId": novel_path.chapter_id},
        )
        if not isinstance(data, dict):
            raise ParseError("Failed to load novel from kavita.")

        try:
            chapter_id = data["id"]
            novel.artist = _join_names(data.get("coverArtists"))
            novel.author = _join_names(data.get("writers"))
            novel.genres = _join_names(data.get("genres"), key="title")
        except (AttributeError, KeyError, TypeError) as e:
            raise ParseError("Failed to load novel from kavita.") from e

        novel.name = data.get("titleName") or novel.name
        novel.cover = self.cover_url(chapter_id)
        novel.status = convert_publication_status(data.get("publicationStatus"))
        novel.summary = data.get("summary")

        toc = self._get_json(
            f"api/Book/{chapter_id}/chapters",
            "Failed to load novel chapters from kavita.",
        )
        if not isinstance(toc, list):
            raise ParseError("Failed to load novel chapters from kavita.")
        try:
            nodes = [ContentNode.from_dict(entry) for entry in toc]
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise ParseError("Failed to load novel chapters from kavita.") from e

        refs = flatten(nodes, 0, int(data.get("pages") or 0), 0, novel_path)
        novel.chapters = [
            ChapterItem(
                name=ref.name,
                path=str(ref.path),
                release_time=data.get("releaseDate"),
                chapter_number=ref.index,
            )
            for ref in refs
        ]
        return novel

    def get_content(self, path: str) -> str:
        """Concatenate the text of every page in the chapter's range."""
        chapter_path = ChapterPath.parse(path)

        text = ""
        for page in range(chapter_path.start_page, chapter_path.end_page + 1):
            try:
                response = self._get(
                    f"api/Book/{chapter_path.novel.chapter_id}/book-page",
                    params={"page": page},
                )
            except httpx.DecodingError as e:
                raise ParseError("Failed to load chapter from kavita.") from e
            text += response.text

        return text

    def resolve_url(self, path: str, is_novel: bool = False) -> str:
        """Browser URL for a novel or chapter path."""
        novel = NovelPath.parse(path) if is_novel else ChapterPath.parse(path).novel
        return (
            f"{self._session.base_url}library/{novel.library_id}"
            f"/series/{novel.series_id}/chapter/{novel.chapter_id}"
        )
