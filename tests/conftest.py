"""Shared fixtures: a throwaway cache database and a fake quran.com API."""
import json
from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest
import requests

from quranstore.quran_api_client import QuranAPIClient
from quranstore.quran_cache import QuranCache
from quranstore.quran_service import QuranService

BASE_URL = "http://api.test/v3"


def verse_count_for(chapter_id: int) -> int:
    """Deterministic verse counts: short chapters, exact pages and multi-page ones."""
    return (chapter_id * 37) % 160 + 1


def make_summary_json(chapter_id: int, verse_count: Optional[int] = None) -> Dict[str, Any]:
    return {
        "id": chapter_id,
        "chapter_number": chapter_id,
        "bismillah_pre": chapter_id != 9,
        "revelation_order": chapter_id + 4,
        "revelation_place": "makkah" if chapter_id % 2 else "madinah",
        "name_complex": f"Al-Chapter {chapter_id}",
        "name_arabic": "الفاتحة",
        "name_simple": f"Chapter {chapter_id}",
        "verses_count": verse_count_for(chapter_id) if verse_count is None else verse_count,
        "pages": [chapter_id, chapter_id + 1],
        "translated_name": {"language_name": "english", "name": f"Name {chapter_id}"},
    }


def make_verse_json(chapter_id: int, number: int) -> Dict[str, Any]:
    key = f"{chapter_id}:{number}"
    return {
        "id": chapter_id * 1000 + number,
        "verse_number": number,
        "chapter_id": chapter_id,
        "verse_key": key,
        "text_madani": "بِسْمِ ٱللَّهِ",
        "text_indopak": "بِسۡمِ اللّٰهِ",
        "text_simple": "بسم الله",
        "juz_number": 1,
        "hizb_number": 1,
        "rub_number": 1,
        "sajdah": None,
        "sajdah_number": None,
        "page_number": chapter_id,
        "audio": {
            "url": f"verses/{key}.mp3",
            "duration": 6,
            "segments": [[0, 0, 630], [1, 630, 1200]],
            "format": "mp3",
        },
        "translations": [{
            "id": 1,
            "language_name": "english",
            "text": f"Verse {key}",
            "resource_name": "Sahih International",
            "resource_id": 20,
        }],
        "media_contents": [],
        "words": [{
            "id": number,
            "position": 1,
            "text_madani": "بِسْمِ",
            "text_indopak": "بِسۡمِ",
            "text_simple": "بسم",
            "verse_key": key,
            "class_name": "p1",
            "line_number": 2,
            "page_number": chapter_id,
            "code": "&#xfb51;",
            "code_v3": "&#xfb51;",
            "char_type": "word",
            "audio": {"url": f"wbw/{key}.mp3"},
            "translation": {"language_name": "english", "text": "In (the) name"},
        }],
    }


def make_response(status: int = 200, body: Any = None, raw: Optional[bytes] = None) -> requests.Response:
    response = requests.Response()
    response.status_code = status
    response._content = raw if raw is not None else json.dumps(body).encode("utf-8")
    response.encoding = "utf-8"
    return response


class FakeQuranAPI:
    """
    Stands in for requests.Session, serving chapters 1..114 out of memory.

    Every call is recorded in ``calls`` as (path, params). Individual routes
    can be overridden through ``overrides`` with a callable returning a
    Response or raising a requests exception.
    """

    def __init__(self, verse_counts: Optional[Dict[int, int]] = None, chapter_total: int = 114):
        self.headers: Dict[str, str] = {}
        self.calls: List[Tuple[str, Optional[dict]]] = []
        self.verse_counts = {i: verse_count_for(i) for i in range(1, chapter_total + 1)}
        self.verse_counts.update(verse_counts or {})
        self.overrides: Dict[str, Callable[[Optional[dict]], requests.Response]] = {}

    def get(self, url: str, params: Optional[dict] = None, timeout: Optional[float] = None):
        assert url.startswith(BASE_URL)
        assert timeout is not None
        path = url[len(BASE_URL):]
        self.calls.append((path, params))
        if path in self.overrides:
            return self.overrides[path](params)
        return self._route(path, params)

    def _route(self, path: str, params: Optional[dict]) -> requests.Response:
        parts = path.strip("/").split("/")
        if parts == ["chapters"]:
            chapters = [make_summary_json(i, n) for i, n in sorted(self.verse_counts.items())]
            return make_response(body={"chapters": chapters})
        if len(parts) >= 2 and parts[0] == "chapters" and int(parts[1]) in self.verse_counts:
            chapter_id = int(parts[1])
            total = self.verse_counts[chapter_id]
            if len(parts) == 2:
                return make_response(body={"chapter": make_summary_json(chapter_id, total)})
            if parts[2] == "verses":
                offset, limit = int(params["offset"]), int(params["limit"])
                numbers = range(offset + 1, min(offset + limit, total) + 1)
                return make_response(body={"verses": [make_verse_json(chapter_id, n) for n in numbers]})
        return make_response(404, body={"status": 404, "error": "Not found"})

    def paths(self, prefix: str = "") -> List[str]:
        return [path for path, _ in self.calls if path.startswith(prefix)]

    def verse_requests(self, chapter_id: int) -> List[dict]:
        return [params for path, params in self.calls if path == f"/chapters/{chapter_id}/verses"]


@pytest.fixture
def fake_api():
    return FakeQuranAPI()


@pytest.fixture
def client(fake_api):
    return QuranAPIClient(session=fake_api, base_url=BASE_URL, timeout=5)


@pytest.fixture
def cache(tmp_path):
    with QuranCache(str(tmp_path / "quran.db")) as store:
        yield store


@pytest.fixture
def service(client, cache):
    return QuranService(client, cache)
