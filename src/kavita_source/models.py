"""Data models for the kavita-source adapter."""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Optional

from kavita_source.exceptions import InvalidPathError


class Format(str, Enum):
    """File formats known to Kavita, as sent in filter statements."""

    IMAGE = "0"
    ARCHIVE = "1"
    UNKNOWN = "2"
    EPUB = "3"
    PDF = "4"


class PublicationStatus(IntEnum):
    ONGOING = 0
    HIATUS = 1
    COMPLETED = 2
    CANCELLED = 3
    ENDED = 4


class FilterField(IntEnum):
    SUMMARY = 0
    SERIES_NAME = 1
    PUBLICATION_STATUS = 2
    LANGUAGES = 3
    AGE_RATING = 4
    USER_RATING = 5
    TAGS = 6
    COLLECTION_TAGS = 7
    TRANSLATORS = 8
    CHARACTERS = 9
    PUBLISHER = 10
    EDITOR = 11
    COVER_ARTIST = 12
    LETTERER = 13
    COLORIST = 14
    INKER = 15
    PENCILLER = 16
    WRITERS = 17
    GENRES = 18
    LIBRARIES = 19
    READ_PROGRESS = 20
    FORMATS = 21
    RELEASE_YEAR = 22
    READ_TIME = 23
    PATH = 24
    FILE_PATH = 25


class FilterComparison(IntEnum):
    EQUAL = 0
    GREATER_THAN = 1
    GREATER_THAN_EQUAL = 2
    LESS_THAN = 3
    LESS_THAN_EQUAL = 4
    CONTAINS = 5
    MUST_CONTAINS = 6
    MATCHES = 7
    NOT_CONTAINS = 8
    NOT_EQUAL = 9
    BEGINS_WITH = 10
    ENDS_WITH = 11
    IS_BEFORE = 12
    IS_AFTER = 13
    IS_IN_LAST = 14
    IS_NOT_IN_LAST = 15


class NovelStatus(str, Enum):
    """Status strings understood by the host application."""

    UNKNOWN = "Unknown"
    ONGOING = "Ongoing"
    COMPLETED = "Completed"
    LICENSED = "Licensed"
    PUBLISHING_FINISHED = "Publishing Finished"
    CANCELLED = "Cancelled"
    ON_HIATUS = "On Hiatus"


@dataclass
class Session:
    """An authenticated identity against one Kavita server."""

    token: str
    refresh_token: str
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> Optional["Session"]:
        """Build a session from the server/storage shape. Partial sessions yield None."""
        if not isinstance(data, dict):
            return None
        token = data.get("token")
        refresh_token = data.get("refreshToken")
        if not token or not refresh_token:
            return None
        extra = {k: v for k, v in data.items() if k not in ("token", "refreshToken")}
        return cls(token=token, refresh_token=refresh_token, extra=extra)

    def to_dict(self) -> dict[str, Any]:
        return {**self.extra, "token": self.token, "refreshToken": self.refresh_token}


@dataclass
class Credentials:
    """Server URL and API key supplied by the user."""

    url: str
    api_key: str


@dataclass
class ContentNode:
    """One entry of a book's nested table of contents."""

    title: str
    page: int
    children: list["ContentNode"] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ContentNode":
        return cls(
            title=data.get("title", ""),
            page=int(data["page"]),
            children=[cls.from_dict(child) for child in data.get("children") or []],
        )


def _split_path(path: str, expected: int) -> list[str]:
    parts = path.split("/")
    if len(parts) != expected or not all(parts):
        raise InvalidPathError(path, expected)
    return parts


def _to_int(path: str, value: str) -> int:
    try:
        return int(value)
    except ValueError as e:
        raise InvalidPathError(path) from e


@dataclass(frozen=True)
class NovelPath:
    """Composite key ``{libraryId}/{seriesId}/{chapterId}`` addressing one novel."""

    library_id: str
    series_id: str
    chapter_id: str

    @classmethod
    def parse(cls, path: str) -> "NovelPath":
        library_id, series_id, chapter_id = _split_path(path, 3)
        return cls(library_id, series_id, chapter_id)

    def __str__(self) -> str:
        return f"{self.library_id}/{self.series_id}/{self.chapter_id}"


@dataclass(frozen=True)
class ChapterPath:
    """Composite key addressing a page range inside one novel."""

    novel: NovelPath
    index: int
    start_page: int
    end_page: int

    @classmethod
    def parse(cls, path: str) -> "ChapterPath":
        library_id, series_id, chapter_id, index, start_page, end_page = _split_path(path, 6)
        return cls(
            novel=NovelPath(library_id, series_id, chapter_id),
            index=_to_int(path, index),
            start_page=_to_int(path, start_page),
            end_page=_to_int(path, end_page),
        )

    def __str__(self) -> str:
        return f"{self.novel}/{self.index}/{self.start_page}/{self.end_page}"


@dataclass(frozen=True)
class FlatChapterRef:
    """A leaf chapter produced by flattening a table of contents."""

    name: str
    index: int
    start_page: int
    end_page: int
    novel: Optional[NovelPath] = None

    @property
    def path(self) -> ChapterPath:
        if self.novel is None:
            raise InvalidPathError()
        return ChapterPath(self.novel, self.index, self.start_page, self.end_page)


@dataclass
class NovelItem:
    """A novel entry as listed to the host."""

    name: str
    path: str
    cover: Optional[str] = None


@dataclass
class ChapterItem:
    """A chapter entry as listed to the host."""

    name: str
    path: str
    release_time: Optional[str] = None
    chapter_number: Optional[int] = None


@dataclass
class SourceNovel:
    """Full novel metadata returned to the host."""

    path: str
    name: str = "Untitled"
    artist: Optional[str] = None
    author: Optional[str] = None
    cover: Optional[str] = None
    genres: Optional[str] = None
    status: Optional[str] = None
    summary: Optional[str] = None
    chapters: list[ChapterItem] = field(default_factory=list)
