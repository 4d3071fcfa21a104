# mangaroo

mangaroo is a Python library that downloads every chapter of a manga from its
series page. It can store each page image as a base64 document in
Elasticsearch, with one index per manga, and keep basic manga metadata in a
shared index.

## Installation

```
pip install .
```

To run the tests as well:

```
pip install ".[test]"
pytest
```

## Example

```python
from mangaroo.config import load
from mangaroo.elastic import ElasticClient
from mangaroo.repository import ElasticMangaRepository
from mangaroo.scraper import DownloaderConfig, MangaDownloader
from mangaroo.scraper_service import ScraperService

cfg = load()
elastic = ElasticClient(cfg.elasticsearch.url)
elastic.ping()  # raises ElasticError if the node does not answer

url = "https://example.com/manga/some-title.12345"
manga_id = "some-title.12345"
downloader_config = DownloaderConfig(
    base_url=url,
    output_folder=cfg.downloader.output_folder,
    user_agent=cfg.downloader.user_agent,
)

with MangaDownloader(downloader_config, manga_id) as downloader:
    downloader.set_elastic_client(elastic)
    elastic.ensure_index(elastic.get_manga_index_name(downloader.get_manga_title(), manga_id))
    service = ScraperService(downloader, ElasticMangaRepository(elastic))
    manga = service.download_and_save_manga(manga_id)
```

## Modules

- `mangaroo.config`: `load()` reads the settings below from the environment
  (or from a mapping you pass) and returns a frozen `Config`, which holds
  `server`, `elasticsearch` and `downloader` sections. `load_browser_config()`
  and `load_download_config()` read `BROWSER_*` and `DOWNLOAD_*` variables.
  `parse_duration()` accepts values such as `30s`, `500ms` or `1h30m`. Values
  that cannot be parsed raise `ConfigError`.

  | Variable               | Default                      |
  |------------------------|------------------------------|
  | `SERVER_PORT`          | `8080`                       |
  | `SERVER_READ_TIMEOUT`  | `30s`                        |
  | `SERVER_WRITE_TIMEOUT` | `30s`                        |
  | `ELASTICSEARCH_URL`    | `http://elasticsearch:9200`  |
  | `OUTPUT_FOLDER`        | `output`                     |
  | `USER_AGENT`           | `Mozilla/5.0...`             |

- `mangaroo.browser.PageBrowser`: fetches HTML pages over HTTP and answers
  CSS selector queries with `select`, `select_one` and `title`. It raises
  `BrowserError` if it is not open or if a page fails to load.
- `mangaroo.scraper.MangaDownloader`: counts the chapter rows on the series
  page and fetches `<base_url>/c<n>` for each chapter. It saves the images as
  `<output_folder>/c<n>/001.jpg`, `002.png` and so on, and picks each
  extension from the content type, the URL and the PNG signature. When an
  Elasticsearch client is set, each image is indexed and then deleted, and
  the chapter folder is removed afterwards. A chapter that fails is logged and
  skipped.
- `mangaroo.scraper_service.ScraperService`: runs a downloader, then saves and
  returns a `Manga` with the id, title and `Status: <status>` description.
- `mangaroo.elastic.ElasticClient`: a thin Elasticsearch HTTP client. It
  provides `ping`, `ensure_index`, `index_manga_image`,
  `get_manga_index_name` (which gives `manga_<cleaned title>_<id>`) and a raw
  `request`.
- `mangaroo.repository.ElasticMangaRepository`: stores `Manga` records in the
  `<prefix>_manga` index (`mangaroo_manga` by default). A missing id raises
  `MangaNotFoundError`.
- `mangaroo.elastic_service.ElasticService`: stores, searches and deletes
  manga and images in indices that the caller chooses.
- `mangaroo.models`: the `Manga`, `Chapter` and `Page` dataclasses with
  `to_dict`/`from_dict`, and the abstract `MangaRepository`.
- `mangaroo.errors`: `AppError` (an HTTP status code, a message and a cause)
  and `is_not_found()`.
- `mangaroo.utils`: `determine_file_extension()`, plus `respond_with_error()`
  and `handle_error()`, which build Flask JSON error responses.
- `mangaroo.logger`: `init_logger()` sets up the `mangaroo` logger, with
  console output or, when `production=True`, JSON output.
  `get_logger()` returns it.

## What it does not do

The package has no command and no HTTP server. It provides no routes or
endpoints. To serve downloads over HTTP, wrap the classes above in your own
application.

The pages are fetched as static HTML, and no JavaScript is run. Image paths
that are relative to the site root are resolved against a fixed host.