"""Downloads a manga and records its metadata in a repository."""

from __future__ import annotations

import logging
from typing import Protocol

from mangaroo.models import Manga, MangaRepository

_log = logging.getLogger(__name__)


class _Downloader(Protocol):
    def run(self) -> None: ...

    def get_manga_title(self) -> str: ...

    def get_manga_status(self) -> str: ...


class ScraperService:
    """Runs a downloader and stores what it learned about the manga."""

    def __init__(self, downloader: _Downloader, repository: MangaRepository) -> None:
        self.downloader = downloader
        self.repository = repository

    def download_and_save_manga(self, manga_id: str) -> Manga:
        """Download every chapter, then save and return the manga's metadata."""
        _log.info("Starting download for manga ID: %s", manga_id)
        try:
            self.downloader.run()
        except Exception as exc:
            raise RuntimeError(f"failed to download manga: {exc}") from exc

        try:
            title = self.downloader.get_manga_title()
        except Exception as exc:  # noqa: BLE001 - a missing title is not fatal
            _log.warning("Could not get manga title: %s", exc)
            title = "unknown"

        try:
            status = self.downloader.get_manga_status()
        except Exception as exc:  # noqa: BLE001 - a missing status is not fatal
            _log.warning("Could not get manga status: %s", exc)
            status = "unknown"

        manga = Manga(id=manga_id, title=title, description=f"Status: {status}")

        try:
            self.repository.save_manga(manga)
        except Exception as exc:
            raise RuntimeError(f"failed to save manga metadata: {exc}") from exc

        _log.info("Successfully downloaded and saved manga: %s", title)
        return manga