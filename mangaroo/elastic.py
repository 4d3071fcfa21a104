"""Small Elasticsearch client used to store downloaded images."""

from __future__ import annotations

import base64
import json
import logging
import re
from collections.abc import Mapping
from datetime import datetime, timezone
from pathlib import Path
from typing import Any
from urllib.parse import quote, urlparse

import requests

_log = logging.getLogger(__name__)


class ElasticError(Exception):
    """Raised when Elasticsearch cannot be reached or answers with an error."""


def describe_response(response: requests.Response) -> str:
    """Render a response as ``[status reason] body``."""
    return f"[{response.status_code} {response.reason}] {response.text}"


def is_error(response: requests.Response) -> bool:
    return response.status_code > 299


class ElasticClient:
    """Talks to one Elasticsearch node over HTTP."""

    def __init__(self, address: str, *, session: requests.Session | None = None,
                 timeout: float | None = 30.0) -> None:
        parsed = urlparse(address)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ElasticError(f"failed to create Elasticsearch client: invalid address {address!r}")
        self.address = address.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def request(self, method: str, path: str, body: Any = None,
                params: Mapping[str, str] | None = None) -> requests.Response:
        """Send a request; HTTP error statuses are returned, transport errors raised."""
        headers = {}
        if body is not None:
            if isinstance(body, str):
                body = body.encode("utf-8")
            elif not isinstance(body, bytes):
                body = json.dumps(body, sort_keys=True).encode("utf-8")
            headers["Content-Type"] = "application/json"
        try:
            return self.session.request(
                method, f"{self.address}/{path.lstrip('/')}", data=body,
                params=params, headers=headers, timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise ElasticError(str(exc)) from exc

    def index_manga_image(self, index_name: str, chapter_id: int, image_num: int,
                          image_path: str | Path, metadata: Mapping[str, Any] | None) -> None:
        """Store an image file, base64 encoded, as a document in ``index_name``."""
        path = str(image_path)
        try:
            image_data = Path(path).read_bytes()
        except OSError as exc:
            raise ElasticError(f"failed to read image file: {exc}") from exc

        content_type = "image/jpeg"
        if path.endswith(".png"):
            content_type = "image/png"
        elif path.endswith(".webp"):
            content_type = "image/webp"

        document = {
            "chapter_id": chapter_id,
            "image_num": image_num,
            "image_data": base64.b64encode(image_data).decode("ascii"),
            "content_type": content_type,
            "downloaded_at": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "metadata": dict(metadata) if metadata is not None else None,
        }
        doc_id = quote(f"{chapter_id}-{image_num}", safe="")
        try:
            response = self.request("PUT", f"{index_name}/_doc/{doc_id}", document, {"refresh": "true"})
        except ElasticError as exc:
            raise ElasticError(f"failed to index document: {exc}") from exc
        if is_error(response):
            raise ElasticError(f"Elasticsearch error: {describe_response(response)}")
        _log.info("Successfully indexed image %d from chapter %d in index %s",
                  image_num, chapter_id, index_name)

    def ping(self) -> None:
        """Raise :class:`ElasticError` unless the node answers."""
        response = self.request("HEAD", "/")
        if is_error(response):
            raise ElasticError(f"ping failed: {describe_response(response)}")

    def ensure_index(self, index_name: str) -> None:
        """Create ``index_name`` if it does not exist yet."""
        if self.request("HEAD", index_name).status_code != 404:
            return
        created = self.request("PUT", index_name)
        if is_error(created):
            raise ElasticError(f"failed to create index: {describe_response(created)}")
        _log.info("Created index: %s", index_name)

    def get_manga_index_name(self, manga_title: str, manga_id: str) -> str:
        """Build an index name from a manga's title and id."""
        clean = re.sub(r"[^a-z0-9_]+", "_", manga_title.strip().lower()).strip("_")
        return f"manga_{clean}_{manga_id}"