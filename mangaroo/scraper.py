"""Downloads every chapter of a manga and optionally stores the images in Elasticsearch."""

from __future__ import annotations

import logging
import os
import shutil
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

import requests

from mangaroo.browser import BrowserError, PageBrowser
from mangaroo.elastic import ElasticClient, ElasticError
from mangaroo.utils import determine_file_extension

_log = logging.getLogger(__name__)

_PNG_MAGIC = b"\x89PNG\r\n\x1a\n"
_CHAPTER_ROWS = "div.chapters table.uk-table tbody tr"
_CHAPTER_IMAGES = "div#imgs img"
_STATUS = "li.d-row-small div.status"
_TITLE_SELECTORS = ("h1.heading", "h1.title", "div.manga-info h1")


@dataclass(frozen=True)
class DownloaderConfig:
    base_url: str
    output_folder: str
    user_agent: str = ""


class MangaDownloader:
    """Walks a manga's chapters and saves their images to disk."""

    def __init__(
        self,
        config: DownloaderConfig,
        manga_id: str,
        *,
        browser: PageBrowser | None = None,
        session: requests.Session | None = None,
        sleeper: Callable[[float], None] = time.sleep,
    ) -> None:
        self.config = config
        self.manga_id = manga_id
        self.elastic: ElasticClient | None = None
        self._session = session if session is not None else requests.Session()
        self._sleeper = sleeper
        self.browser = (
            browser
            if browser is not None
            else PageBrowser(config.user_agent, session=self._session, sleeper=sleeper)
        )
        try:
            self.browser.open()
        except BrowserError as exc:
            raise BrowserError(f"failed to initialize browser: {exc}") from exc

    def __enter__(self) -> MangaDownloader:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def set_elastic_client(self, elastic_client: ElasticClient | None) -> None:
        """Use ``elastic_client`` to store downloaded images; None keeps them on disk."""
        self.elastic = elastic_client
        if elastic_client is None:
            _log.warning("Elasticsearch client is not set.")

    def close(self) -> None:
        """Shut the browser down, never raising."""
        try:
            self.browser.close()
        except Exception as exc:  # noqa: BLE001 - closing must never fail
            _log.warning("Recovered from error when closing browser: %s", exc)

    def run(self) -> None:
        """Download every chapter; a failing chapter is logged and skipped."""
        Path(self.config.output_folder).mkdir(parents=True, exist_ok=True)

        try:
            status = self.get_manga_status()
        except BrowserError as exc:
            _log.warning("Could not get manga status: %s", exc)
            status = "Unknown"
        print(f"Manga Status: {status}")

        try:
            total_chapters = self.get_total_chapters()
        except BrowserError as exc:
            raise BrowserError(f"failed to get chapter count: {exc}") from exc
        print(f"Found {total_chapters} chapters")

        for chapter_num in range(1, total_chapters + 1):
            try:
                self.download_chapter(chapter_num)
            except (BrowserError, OSError, requests.RequestException) as exc:
                _log.error("Error downloading chapter %d: %s", chapter_num, exc)
            self._sleeper(3)

    def _load(self, url: str, wait: float, what: str) -> None:
        try:
            self.browser.navigate(url)
        except BrowserError as exc:
            raise BrowserError(f"failed to navigate to {what}: {exc}") from exc
        try:
            self.browser.sleep(wait)
        except BrowserError as exc:
            _log.warning("Sleep failed: %s", exc)

    def get_total_chapters(self) -> int:
        """Count the chapter rows on the manga's main page."""
        self._load(self.config.base_url, 2, "URL")
        return len(self.browser.select(_CHAPTER_ROWS))

    def download_chapter(self, chapter_num: int) -> None:
        """Download one chapter's images and hand them to Elasticsearch if set."""
        chapter_url = f"{self.config.base_url}/c{chapter_num}"
        chapter_folder = Path(self.config.output_folder) / f"c{chapter_num}"
        chapter_folder.mkdir(parents=True, exist_ok=True)

        try:
            image_urls = self.get_chapter_image_urls(chapter_url)
        except BrowserError as exc:
            raise BrowserError(f"failed to get image URLs: {exc}") from exc

        try:
            manga_title = self.get_manga_title()
        except BrowserError as exc:
            _log.warning("Could not get manga title: %s", exc)
            manga_title = "unknown"

        downloaded: list[Path] = []
        for position, image_url in enumerate(image_urls, start=1):
            absolute_url = self.normalize_image_url(image_url)
            temp_path = chapter_folder / f"{position:03d}_temp"
            try:
                ext = self.download_and_determine_extension(absolute_url, temp_path)
            except (OSError, requests.RequestException) as exc:
                _log.error("Error downloading image %d: %s", position, exc)
                continue

            final_path = chapter_folder / f"{position:03d}.{ext}"
            try:
                os.replace(temp_path, final_path)
            except OSError as exc:
                _log.error("Error renaming temp file for image %d: %s", position, exc)
                continue

            downloaded.append(final_path)
            self._sleeper(0.5)

        if self.elastic is None:
            return

        index_name = self.elastic.get_manga_index_name(manga_title, self.manga_id)
        for image_index, image_path in enumerate(downloaded, start=1):
            metadata = {
                "manga_url": self.config.base_url,
                "manga_title": manga_title,
                "manga_id": self.manga_id,
                "chapter_num": chapter_num,
                "image_index": image_index,
            }
            try:
                self.elastic.index_manga_image(
                    index_name, chapter_num, image_index, str(image_path), metadata
                )
            except ElasticError as exc:
                _log.error("Failed to upload image %d to Elasticsearch: %s", image_index, exc)
                continue
            try:
                image_path.unlink()
            except OSError as exc:
                _log.error("Failed to delete image %s: %s", image_path, exc)

        try:
            shutil.rmtree(chapter_folder)
        except OSError as exc:
            _log.error("Failed to delete chapter folder %s: %s", chapter_folder, exc)

    def get_chapter_image_urls(self, chapter_url: str) -> list[str]:
        """Return the image URLs of a chapter page, skipping inline data URLs."""
        self._load(chapter_url, 3, "chapter URL")
        urls = []
        for image in self.browser.select(_CHAPTER_IMAGES):
            url = image.get("data-src") or image.get("src")
            if url and not url.startswith("data:"):
                urls.append(url)
        return urls

    def normalize_image_url(self, url: str) -> str:
        """Turn a relative or scheme-less image URL into an absolute one."""
        if url.startswith("http"):
            return url
        if url.startswith("//"):
            return "https:" + url
        if not url.startswith("/"):
            return "https://" + url
        return "https://mangakatana.com" + url

    def get_manga_status(self) -> str:
        """Return the publication status shown on the manga's main page."""
        self._load(self.config.base_url, 2, "base URL")
        element = self.browser.select_one(_STATUS)
        status = element.get_text().strip() if element is not None else "Unknown"
        return status.strip().replace("status", "").strip()

    def download_and_determine_extension(self, url: str, temp_path: str | Path) -> str:
        """Save ``url`` to ``temp_path`` and return the image's file extension."""
        headers = {"User-Agent": self.config.user_agent, "Referer": self.config.base_url}
        response = self._session.get(url, headers=headers, timeout=30)
        if response.status_code != 200:
            raise requests.HTTPError(
                f"HTTP error: {response.status_code} {response.reason}", response=response
            )

        content = response.content
        Path(temp_path).write_bytes(content)

        ext = determine_file_extension(url, response.headers.get("Content-Type", ""))
        if ext in ("jpg", "jpeg") and content.startswith(_PNG_MAGIC):
            ext = "png"
        return ext

    def get_manga_title(self) -> str:
        """Return the manga's title from its main page, or ``unknown``."""
        _log.info("Getting manga title for: %s", self.config.base_url)
        try:
            self.browser.navigate(self.config.base_url)
        except BrowserError as exc:
            raise BrowserError(f"failed to navigate to base URL: {exc}") from exc
        self.browser.sleep(2)

        for selector in _TITLE_SELECTORS:
            element = self.browser.select_one(selector)
            if element is not None:
                text = element.get_text().strip()
                if text:
                    return text
        fallback = self.browser.title().split("|")[0].strip()
        title = fallback or "unknown"
        _log.info("Found manga title: %s", title)
        return title.strip()