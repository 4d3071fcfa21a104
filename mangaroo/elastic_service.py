"""Manga and image storage operations over an arbitrary Elasticsearch index."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

from mangaroo.elastic import ElasticClient, ElasticError, describe_response, is_error
from mangaroo.models import Manga
from mangaroo.repository import ElasticMangaRepository

_MAX_RESULTS = 10_000


class ElasticService:
    """Stores manga and their images in caller-chosen indices."""

    def __init__(self, elastic_client: ElasticClient) -> None:
        self.elastic_client = elastic_client

    def _call(self, path: str, body: dict[str, Any], action: str,
              params: Mapping[str, str] | None = None) -> Any:
        try:
            response = self.elastic_client.request("POST", path, body, params)
        except ElasticError as exc:
            raise ElasticError(f"failed to {action}: {exc}") from exc
        if is_error(response):
            raise ElasticError(f"Elasticsearch error: {describe_response(response)}")
        return response

    def _hits(self, index_name: str, query: dict[str, Any], action: str,
              **extra: Any) -> list[dict[str, Any]]:
        response = self._call(f"{index_name}/_search",
                              {"query": query, "size": _MAX_RESULTS, **extra}, action)
        try:
            hits = response.json()["hits"]["hits"]
        except ValueError as exc:
            raise ElasticError(f"error parsing response: {exc}") from exc
        except (KeyError, TypeError):
            hits = None
        if not isinstance(hits, list):
            raise ElasticError("unexpected response format")
        return [hit for hit in hits if isinstance(hit, dict)]

    def _repository(self, index_name: str) -> ElasticMangaRepository:
        return ElasticMangaRepository(self.elastic_client, index_name=index_name)

    def index_manga_image(self, index_name: str, chapter_id: int, image_num: int,
                          image_path: str | Path, metadata: Mapping[str, Any] | None) -> None:
        """Store an image file as a document in ``index_name``."""
        self.elastic_client.index_manga_image(index_name, chapter_id, image_num, image_path, metadata)

    def search_manga_image(self, index_name: str, query: str) -> list[str]:
        """Return the ids of image documents matching a query string."""
        hits = self._hits(index_name, {"query_string": {"query": query}}, "search manga images")
        return [hit["_id"] for hit in hits if isinstance(hit.get("_id"), str)]

    def delete_manga_image(self, index_name: str, chapter_id: int) -> None:
        """Delete every image document of one chapter."""
        self._call(f"{index_name}/_delete_by_query", {"query": {"term": {"chapter_id": chapter_id}}},
                   "delete manga images", {"refresh": "true"})

    def get_manga_image(self, index_name: str, chapter_id: int) -> list[str]:
        """Return the base64 image data of one chapter, in page order."""
        hits = self._hits(index_name, {"term": {"chapter_id": chapter_id}}, "get manga images",
                          sort=[{"image_num": {"order": "asc"}}])
        sources = (hit.get("_source") for hit in hits)
        return [s["image_data"] for s in sources
                if isinstance(s, dict) and isinstance(s.get("image_data"), str)]

    def index_manga(self, index_name: str, manga: Manga) -> None:
        """Store ``manga`` in ``index_name``."""
        self._repository(index_name).save_manga(manga)

    def get_manga(self, index_name: str, manga_id: str) -> Manga:
        """Return the manga stored under ``manga_id`` in ``index_name``."""
        return self._repository(index_name).get_manga_by_id(manga_id)

    def get_all_manga(self, index_name: str) -> list[Manga]:
        """Return every manga in ``index_name``."""
        return self._repository(index_name).get_all_manga()

    def delete_manga(self, index_name: str, manga_id: str) -> None:
        """Remove a manga from ``index_name``."""
        self._repository(index_name).delete_manga(manga_id)

    def search_manga(self, index_name: str, query: str) -> list[Manga]:
        """Return the manga whose text fields match ``query``."""
        fields = ["title", "description", "authors", "genres"]
        hits = self._hits(index_name, {"multi_match": {"query": query, "fields": fields}},
                          "search manga")
        try:
            return [Manga.from_dict(hit["_source"]) for hit in hits
                    if isinstance(hit.get("_source"), dict)]
        except TypeError as exc:
            raise ElasticError(f"error unmarshaling manga: {exc}") from exc

    def get_manga_index_name(self, manga_title: str, manga_id: str) -> str:
        """Build an index name from a manga's title and id."""
        return self.elastic_client.get_manga_index_name(manga_title, manga_id)