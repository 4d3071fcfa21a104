import json

import pytest
import responses
from responses import matchers

from mangaroo.elastic import ElasticClient, ElasticError
from mangaroo.models import Chapter, Manga, Page
from mangaroo.repository import ElasticMangaRepository, MangaNotFoundError

BASE = "http://localhost:9200"
INDEX = f"{BASE}/mangaroo_manga"


@pytest.fixture
def mocked():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        yield rsps


@pytest.fixture
def repo():
    return ElasticMangaRepository(ElasticClient(BASE), "mangaroo")


def sample_manga():
    return Manga(
        id="one-piece",
        title="One Piece",
        description="Status: Ongoing",
        authors=["Oda"],
        genres=["Adventure"],
        chapters=[Chapter(id="c1", number="1", pages=[Page(number=1, path="c1/001.jpg")])],
    )


def test_index_name_uses_prefix(repo):
    assert repo.index_name == "mangaroo_manga"


def test_save_manga_creates_index_and_stores_document(mocked, repo):
    mocked.add(responses.HEAD, INDEX, status=404)
    mocked.add(responses.PUT, INDEX, status=200, json={"acknowledged": True})
    mocked.add(
        responses.PUT,
        f"{INDEX}/_doc/one-piece",
        status=201,
        json={"result": "created"},
        match=[matchers.query_param_matcher({"refresh": "true"})],
    )
    manga = sample_manga()
    repo.save_manga(manga)
    assert len(mocked.calls) == 3
    assert json.loads(mocked.calls[2].request.body) == manga.to_dict()


def test_save_manga_skips_creation_when_index_exists(mocked, repo):
    mocked.add(responses.HEAD, INDEX, status=200)
    mocked.add(responses.PUT, f"{INDEX}/_doc/one-piece", status=200, json={})
    assert repo.save_manga(sample_manga()) is None
    assert [call.request.method for call in mocked.calls] == ["HEAD", "PUT"]


def test_save_manga_reports_elastic_error(mocked, repo):
    mocked.add(responses.HEAD, INDEX, status=200)
    mocked.add(responses.PUT, f"{INDEX}/_doc/one-piece", status=400, body="bad")
    with pytest.raises(ElasticError, match="^Elasticsearch error: "):
        repo.save_manga(sample_manga())


def test_save_manga_reports_index_failure(mocked, repo):
    mocked.add(responses.HEAD, INDEX, status=404)
    mocked.add(responses.PUT, INDEX, status=500, body="boom")
    with pytest.raises(ElasticError, match="^failed to ensure index exists"):
        repo.save_manga(sample_manga())


def test_get_manga_by_id_round_trip(mocked, repo):
    manga = sample_manga()
    mocked.add(
        responses.GET,
        f"{INDEX}/_doc/one-piece",
        json={"_id": "one-piece", "found": True, "_source": manga.to_dict()},
    )
    assert repo.get_manga_by_id("one-piece") == manga


def test_get_manga_by_id_not_found(mocked, repo):
    mocked.add(responses.GET, f"{INDEX}/_doc/missing", status=404, json={"found": False})
    with pytest.raises(MangaNotFoundError, match="manga not found"):
        repo.get_manga_by_id("missing")


def test_get_manga_by_id_without_source(mocked, repo):
    mocked.add(responses.GET, f"{INDEX}/_doc/x", json={"found": True})
    with pytest.raises(ElasticError, match="unexpected response format"):
        repo.get_manga_by_id("x")


def test_get_manga_by_id_invalid_json(mocked, repo):
    mocked.add(responses.GET, f"{INDEX}/_doc/x", body="not json")
    with pytest.raises(ElasticError, match="^error parsing response"):
        repo.get_manga_by_id("x")


def test_get_manga_by_id_transport_failure(mocked, repo):
    with pytest.raises(ElasticError, match="^failed to get manga"):
        repo.get_manga_by_id("x")


def test_get_all_manga_skips_hits_without_source(mocked, repo):
    manga = sample_manga()
    mocked.add(
        responses.POST,
        f"{INDEX}/_search",
        json={"hits": {"hits": [{"_id": "a"}, {"_source": manga.to_dict()}]}},
    )
    assert repo.get_all_manga() == [manga]
    assert json.loads(mocked.calls[0].request.body) == {"query": {"match_all": {}}}


def test_get_all_manga_empty(mocked, repo):
    mocked.add(responses.POST, f"{INDEX}/_search", json={"hits": {"hits": []}})
    assert repo.get_all_manga() == []


def test_get_all_manga_bad_format(mocked, repo):
    mocked.add(responses.POST, f"{INDEX}/_search", json={"took": 1})
    with pytest.raises(ElasticError, match="unexpected response format"):
        repo.get_all_manga()


def test_delete_manga(mocked, repo):
    mocked.add(responses.DELETE, f"{INDEX}/_doc/one-piece", json={"result": "deleted"})
    assert repo.delete_manga("one-piece") is None
    assert [call.request.method for call in mocked.calls] == ["DELETE"]


def test_delete_manga_error(mocked, repo):
    mocked.add(responses.DELETE, f"{INDEX}/_doc/one-piece", status=404, json={})
    with pytest.raises(ElasticError, match="^Elasticsearch error"):
        repo.delete_manga("one-piece")