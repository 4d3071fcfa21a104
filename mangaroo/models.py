"""Domain models for manga, chapters and pages, and the repository contract."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


def _get(data: Mapping[str, Any], key: str, kind: type, default: Any) -> Any:
    value = data.get(key)
    if value is None:
        return default
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise TypeError(f"field {key!r} must be {kind.__name__}, got {type(value).__name__}")
    return value


def _check(data: Any, kind: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise TypeError(f"cannot decode {kind} from {type(data).__name__}")
    return data


def _strings(data: Mapping[str, Any], key: str) -> list[str]:
    items = _get(data, key, list, [])
    if not all(isinstance(item, str) for item in items):
        raise TypeError(f"field {key!r} must hold strings only")
    return list(items)


@dataclass
class Page:
    """One image of a chapter."""

    number: int = 0
    path: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"number": self.number, "path": self.path}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Page:
        data = _check(data, "page")
        return cls(_get(data, "number", int, 0), _get(data, "path", str, ""))


@dataclass
class Chapter:
    """A chapter and its pages."""

    id: str = ""
    title: str = ""
    number: str = ""
    pages: list[Page] = field(default_factory=list)
    uploaded: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "title": self.title, "number": self.number,
                "pages": [page.to_dict() for page in self.pages], "uploaded": self.uploaded}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Chapter:
        data = _check(data, "chapter")
        return cls(
            *(_get(data, key, str, "") for key in ("id", "title", "number")),
            pages=[Page.from_dict(item) for item in _get(data, "pages", list, [])],
            uploaded=_get(data, "uploaded", str, ""),
        )


@dataclass
class Manga:
    """A manga series with its metadata and chapters."""

    id: str = ""
    title: str = ""
    description: str = ""
    authors: list[str] = field(default_factory=list)
    genres: list[str] = field(default_factory=list)
    cover_path: str = ""
    chapters: list[Chapter] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "title": self.title, "description": self.description,
                "authors": list(self.authors), "genres": list(self.genres),
                "cover_path": self.cover_path,
                "chapters": [chapter.to_dict() for chapter in self.chapters]}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Manga:
        data = _check(data, "manga")
        return cls(
            *(_get(data, key, str, "") for key in ("id", "title", "description")),
            authors=_strings(data, "authors"),
            genres=_strings(data, "genres"),
            cover_path=_get(data, "cover_path", str, ""),
            chapters=[Chapter.from_dict(item) for item in _get(data, "chapters", list, [])],
        )


class MangaRepository(ABC):
    """Storage for manga metadata."""

    @abstractmethod
    def save_manga(self, manga: Manga) -> None:
        """Store or replace a manga."""

    @abstractmethod
    def get_manga_by_id(self, manga_id: str) -> Manga:
        """Return the manga with the given id."""

    @abstractmethod
    def get_all_manga(self) -> list[Manga]:
        """Return every stored manga."""

    @abstractmethod
    def delete_manga(self, manga_id: str) -> None:
        """Remove the manga with the given id."""