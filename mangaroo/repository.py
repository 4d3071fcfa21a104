"""Manga metadata stored as documents in an Elasticsearch index."""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import requests

from mangaroo.elastic import ElasticClient, ElasticError, describe_response, is_error
from mangaroo.models import Manga, MangaRepository


class MangaNotFoundError(LookupError):
    """Raised when no manga is stored under the requested id."""


def _decode(response: requests.Response) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        raise ElasticError(f"error parsing response: {exc}") from exc


def _to_manga(source: Any) -> Manga:
    try:
        return Manga.from_dict(source)
    except TypeError as exc:
        raise ElasticError(f"error unmarshaling manga: {exc}") from exc


def _check(response: requests.Response) -> None:
    if is_error(response):
        raise ElasticError(f"Elasticsearch error: {describe_response(response)}")


class ElasticMangaRepository(MangaRepository):
    """A :class:`MangaRepository` that keeps each manga as one document."""

    def __init__(
        self,
        client: ElasticClient,
        index_prefix: str = "mangaroo",
        *,
        index_name: str | None = None,
    ) -> None:
        self.client = client
        self.index_prefix = index_prefix
        self.index_name = index_name if index_name is not None else f"{index_prefix}_manga"

    def _doc_path(self, manga_id: str) -> str:
        return f"{self.index_name}/_doc/{quote(manga_id, safe='')}"

    def save_manga(self, manga: Manga) -> None:
        """Store ``manga`` under its id, creating the index if needed."""
        try:
            self.client.ensure_index(self.index_name)
        except ElasticError as exc:
            raise ElasticError(f"failed to ensure index exists: {exc}") from exc

        try:
            response = self.client.request(
                "PUT", self._doc_path(manga.id), manga.to_dict(), {"refresh": "true"}
            )
        except ElasticError as exc:
            raise ElasticError(f"failed to index manga: {exc}") from exc
        _check(response)

    def get_manga_by_id(self, manga_id: str) -> Manga:
        """Return the manga stored under ``manga_id``."""
        try:
            response = self.client.request("GET", self._doc_path(manga_id))
        except ElasticError as exc:
            raise ElasticError(f"failed to get manga: {exc}") from exc

        if response.status_code == 404:
            raise MangaNotFoundError("manga not found")
        _check(response)

        result = _decode(response)
        source = result.get("_source") if isinstance(result, dict) else None
        if not isinstance(source, dict):
            raise ElasticError("unexpected response format")
        return _to_manga(source)

    def get_all_manga(self) -> list[Manga]:
        """Return every manga in the index."""
        try:
            response = self.client.request(
                "POST", f"{self.index_name}/_search", {"query": {"match_all": {}}}
            )
        except ElasticError as exc:
            raise ElasticError(f"failed to search manga: {exc}") from exc
        _check(response)

        result = _decode(response)
        hits = result.get("hits") if isinstance(result, dict) else None
        if not isinstance(hits, dict):
            raise ElasticError("unexpected response format")
        hit_list = hits.get("hits")
        if not isinstance(hit_list, list):
            raise ElasticError("unexpected response format")

        mangas = []
        for hit in hit_list:
            source = hit.get("_source") if isinstance(hit, dict) else None
            if isinstance(source, dict):
                mangas.append(_to_manga(source))
        return mangas

    def delete_manga(self, manga_id: str) -> None:
        """Remove the manga stored under ``manga_id``."""
        try:
            response = self.client.request("DELETE", self._doc_path(manga_id))
        except ElasticError as exc:
            raise ElasticError(f"failed to delete manga: {exc}") from exc
        _check(response)