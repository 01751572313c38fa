# quranstore/quran_api_client.py
from typing import Any, Dict, List, Optional

import requests
from pydantic import ValidationError

from .models import ChapterSummary, Verse


class QuranAPIError(Exception):
    """Base exception for Quran API errors"""


class UnexpectedStatusError(QuranAPIError):
    """The API answered with a status other than 200 OK"""

    def __init__(self, status_code: int, url: str):
        super().__init__(f"Unexpected status {status_code} from {url}")
        self.status_code = status_code
        self.url = url


class TransportError(QuranAPIError):
    """The request never produced a response (connection error, timeout, ...)"""


class InvalidResponseError(QuranAPIError):
    """The response body was not the JSON document we expected"""


class QuranAPIClient:
    BASE_URL = "http://staging.quran.com:3000/api/v3"
    TIMEOUT = 10
    VERSES_PAGE_SIZE = 50 # 50 is the max number of verses per request

    def __init__(self, session: Optional[requests.Session] = None,
                 base_url: str = BASE_URL, timeout: float = TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": "QuranStore/1.0"})

    def _get(self, path: str, envelope: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """GET base_url + path and return the value under the ``envelope`` key."""
        url = f"{self.base_url}{path}"
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise TransportError(f"Request to {url} failed: {e}") from e
        return self._handle_response(response, url, envelope)

    def _handle_response(self, response: requests.Response, url: str, envelope: str) -> Any:
        """Check the status, decode the JSON body and unwrap it"""
        if response.status_code != requests.codes.ok:
            raise UnexpectedStatusError(response.status_code, url)
        try:
            data = response.json()
        except ValueError as e:
            # requests' JSONDecodeError subclasses ValueError
            raise InvalidResponseError(f"Invalid JSON response from {url}: {e}") from e
        if not isinstance(data, dict) or envelope not in data:
            raise InvalidResponseError(f"Response from {url} has no '{envelope}' field")
        return data[envelope]

    def get_chapters_summary(self) -> List[ChapterSummary]:
        """Fetch metadata for every chapter"""
        chapters = self._get("/chapters", "chapters")
        try:
            return [ChapterSummary.model_validate(item) for item in chapters]
        except (ValidationError, TypeError) as e:
            raise InvalidResponseError(f"Malformed chapter list: {e}") from e

    def get_chapter_summary(self, chapter_id: int) -> ChapterSummary:
        """Fetch metadata for a single chapter"""
        chapter = self._get(f"/chapters/{chapter_id}", "chapter")
        try:
            return ChapterSummary.model_validate(chapter)
        except ValidationError as e:
            raise InvalidResponseError(f"Malformed chapter {chapter_id}: {e}") from e

    def get_verses_page(self, chapter_id: int, page: int, offset: int,
                        limit: int = VERSES_PAGE_SIZE) -> List[Verse]:
        """
        Fetch one page of verses.

        The upstream API takes both a page counter and an offset; which one it
        honours is undocumented, so both are always sent.
        """
        params = {"page": page, "offset": offset, "limit": limit}
        verses = self._get(f"/chapters/{chapter_id}/verses", "verses", params=params)
        try:
            return [Verse.model_validate(item) for item in verses]
        except (ValidationError, TypeError) as e:
            raise InvalidResponseError(
                f"Malformed verses page {page} for chapter {chapter_id}: {e}") from e

    def get_verses(self, chapter_id: int) -> List[Verse]:
        """
        Page through every verse of a chapter.

        Pages are requested one after another until a page comes back shorter
        than VERSES_PAGE_SIZE (an empty page included). No total is assumed
        up front.
        """
        verses: List[Verse] = []
        page, offset = 0, 0
        while True:
            batch = self.get_verses_page(chapter_id, page, offset, self.VERSES_PAGE_SIZE)
            verses.extend(batch)
            if len(batch) < self.VERSES_PAGE_SIZE:
                break
            page += 1
            offset += len(batch)
        return verses
