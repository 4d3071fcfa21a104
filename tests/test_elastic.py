import base64
import json

import pytest
import requests
import responses

from mangaroo.elastic import ElasticClient, ElasticError

BASE = "http://localhost:9200"


@pytest.fixture
def mocked():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        yield rsps


@pytest.fixture
def client():
    return ElasticClient(BASE)


def test_invalid_address_rejected():
    with pytest.raises(ElasticError):
        ElasticClient("not a url")


def test_ping_success(mocked, client):
    mocked.add(responses.HEAD, BASE + "/", status=200)
    assert client.ping() is None
    assert len(mocked.calls) == 1
    assert mocked.calls[0].request.method == "HEAD"


def test_ping_error_status(mocked, client):
    mocked.add(responses.HEAD, BASE + "/", status=500)
    with pytest.raises(ElasticError, match="ping failed"):
        client.ping()


def test_ping_connection_error(mocked, client):
    mocked.add(responses.HEAD, BASE + "/", body=requests.ConnectionError("down"))
    with pytest.raises(ElasticError):
        client.ping()


def test_request_returns_error_status(mocked, client):
    mocked.add(responses.GET, BASE + "/missing", status=404, body="{}")
    assert client.request("GET", "/missing").status_code == 404


def test_ensure_index_existing(mocked, client):
    mocked.add(responses.HEAD, BASE + "/mangaroo_manga", status=200)
    assert client.ensure_index("mangaroo_manga") is None
    assert [call.request.method for call in mocked.calls] == ["HEAD"]


def test_ensure_index_creates_missing(mocked, client):
    mocked.add(responses.HEAD, BASE + "/mangaroo_manga", status=404)
    mocked.add(responses.PUT, BASE + "/mangaroo_manga", status=200, json={"acknowledged": True})
    assert client.ensure_index("mangaroo_manga") is None
    assert [call.request.method for call in mocked.calls] == ["HEAD", "PUT"]


def test_ensure_index_create_failure(mocked, client):
    mocked.add(responses.HEAD, BASE + "/bad", status=404)
    mocked.add(responses.PUT, BASE + "/bad", status=400, body="invalid")
    with pytest.raises(ElasticError, match="failed to create index"):
        client.ensure_index("bad")


def test_index_manga_image_document(mocked, client, tmp_path):
    image = tmp_path / "007.png"
    data = b"\x89PNG\r\n\x1a\nimage-bytes"
    image.write_bytes(data)
    mocked.add(responses.PUT, BASE + "/idx/_doc/3-7", status=201, json={"result": "created"})

    metadata = {"manga_id": "m1", "chapter_num": 3}
    client.index_manga_image("idx", 3, 7, str(image), metadata)

    request = mocked.calls[0].request
    assert "refresh=true" in request.url
    document = json.loads(request.body)
    assert document["chapter_id"] == 3
    assert document["image_num"] == 7
    assert document["content_type"] == "image/png"
    assert base64.b64decode(document["image_data"]) == data
    assert document["metadata"] == metadata


def test_index_manga_image_defaults_to_jpeg(mocked, client, tmp_path):
    image = tmp_path / "001.jpg"
    image.write_bytes(b"jpeg")
    mocked.add(responses.PUT, BASE + "/idx/_doc/1-1", status=201, json={})
    assert client.index_manga_image("idx", 1, 1, image, {}) is None
    assert json.loads(mocked.calls[0].request.body)["content_type"] == "image/jpeg"


def test_index_manga_image_missing_file(client, tmp_path):
    with pytest.raises(ElasticError, match="failed to read image file"):
        client.index_manga_image("idx", 1, 1, tmp_path / "absent.jpg", {})


def test_index_manga_image_server_error(mocked, client, tmp_path):
    image = tmp_path / "001.webp"
    image.write_bytes(b"webp")
    mocked.add(responses.PUT, BASE + "/idx/_doc/1-1", status=400, body="mapping error")
    with pytest.raises(ElasticError, match="Elasticsearch error"):
        client.index_manga_image("idx", 1, 1, image, {})


def test_manga_index_name(client):
    assert client.get_manga_index_name("  One Piece! ", "42") == "manga_one_piece_42"


@pytest.mark.parametrize(
    "title, expected",
    [
        ("Ääkkönen -- Story", "manga_kk_nen_story_id9"),
        ("UPPER case", "manga_upper_case_id9"),
        ("x/y\\z", "manga_x_y_z_id9"),
        ("___", "manga__id9"),
    ],
)
def test_manga_index_name_is_always_clean(client, title, expected):
    assert client.get_manga_index_name(title, "id9") == expected


def test_manga_index_name_all_invalid(client):
    assert client.get_manga_index_name("!!!", "7") == "manga__7"