import pytest

from mangaroo.models import Chapter, Manga, MangaRepository, Page


def _sample() -> Manga:
    return Manga(
        id="m1",
        title="Sample",
        description="Status: Ongoing",
        authors=["Alice", "Bob"],
        genres=["Action"],
        cover_path="covers/m1.jpg",
        chapters=[
            Chapter(
                id="c1",
                title="Start",
                number="1",
                pages=[Page(number=1, path="c1/001.jpg"), Page(number=2, path="c1/002.png")],
                uploaded="2024-01-01",
            )
        ],
    )


def test_manga_round_trip():
    manga = _sample()
    assert Manga.from_dict(manga.to_dict()) == manga


def test_manga_keys_follow_json_names():
    keys = set(_sample().to_dict())
    assert keys == {"id", "title", "description", "authors", "genres", "cover_path", "chapters"}


def test_chapter_and_page_round_trip():
    chapter = _sample().chapters[0]
    assert Chapter.from_dict(chapter.to_dict()) == chapter
    assert Page.from_dict(chapter.pages[1].to_dict()) == chapter.pages[1]


def test_missing_and_null_fields_take_zero_values():
    manga = Manga.from_dict({"id": "x", "authors": None})
    assert manga == Manga(id="x")
    assert manga.authors == []
    assert manga.chapters == []


def test_unknown_keys_are_ignored():
    manga = Manga.from_dict({"id": "x", "title": "T", "rating": 5})
    assert manga.title == "T"


def test_wrong_type_is_rejected():
    with pytest.raises(TypeError):
        Page.from_dict({"number": "one"})
    with pytest.raises(TypeError):
        Manga.from_dict({"authors": "Alice"})
    with pytest.raises(TypeError):
        Manga.from_dict(["not", "a", "mapping"])


def test_repository_is_abstract():
    with pytest.raises(TypeError):
        MangaRepository()


class _MemoryRepository(MangaRepository):
    def __init__(self):
        self.items = {}

    def save_manga(self, manga):
        self.items[manga.id] = manga

    def get_manga_by_id(self, manga_id):
        return self.items[manga_id]

    def get_all_manga(self):
        return list(self.items.values())

    def delete_manga(self, manga_id):
        del self.items[manga_id]


def test_concrete_repository_satisfies_contract():
    repo = _MemoryRepository()
    manga = _sample()
    repo.save_manga(manga)
    assert repo.get_manga_by_id("m1") is manga
    repo.delete_manga("m1")
    assert repo.get_all_manga() == []