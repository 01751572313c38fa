# quranstore/quran_service.py
import sys
from typing import Dict, List, Optional

from colorama import Fore, Style

from .codec import DecodeError, decode, encode
from .models import TOTAL_CHAPTERS, Chapter, ChapterSummary
from .quran_api_client import QuranAPIClient
from .quran_cache import SUMMARY_KEY, CacheMissError, QuranCache, StoreError, chapter_key


class QuranService:
    """
    Serves chapter data from the local cache, falling back to the API.

    Reads try the cache first. Anything missing, unreadable or (for the
    summary list) incomplete is fetched from the API and written back. A
    failed write-back only prints a warning; API errors propagate.
    """

    def __init__(self, client: QuranAPIClient, cache: QuranCache):
        self.client = client
        self.cache = cache

    # --- Public operations ---

    def get_chapters_summary(self) -> List[ChapterSummary]:
        """Metadata for all 114 chapters"""
        summaries = self._get_summary_db()
        if summaries is not None:
            return summaries

        summaries = self.client.get_chapters_summary()
        self._store(SUMMARY_KEY, summaries, List[ChapterSummary])
        return summaries

    def get_chapter(self, chapter_id: int) -> Chapter:
        """A full chapter with all of its verses"""
        chapter = self._get_chapter_db(chapter_id)
        if chapter is not None:
            return chapter

        chapter = self._fetch_chapter(chapter_id)
        self._store(chapter_key(chapter_id), chapter, Chapter)
        return chapter

    def delete_chapter(self, chapter_id: int):
        """Evict one chapter from the cache so the next read refetches it"""
        self.cache.delete(chapter_key(chapter_id))

    # --- Remote assembly ---

    def _get_chapter_summary(self, chapter_id: int) -> ChapterSummary:
        summaries = self._get_summary_db()
        if summaries is not None:
            by_id: Dict[int, ChapterSummary] = {s.id: s for s in summaries}
            if chapter_id in by_id:
                return by_id[chapter_id]
        return self.client.get_chapter_summary(chapter_id)

    def _fetch_chapter(self, chapter_id: int) -> Chapter:
        summary = self._get_chapter_summary(chapter_id)
        verses = self.client.get_verses(chapter_id)
        if summary.verse_count and len(verses) != summary.verse_count:
            print(f"{Fore.YELLOW}Warning: chapter {chapter_id} returned {len(verses)} verses, "
                  f"expected {summary.verse_count}.{Style.RESET_ALL}", file=sys.stderr)
        return Chapter.from_summary(summary, verses)

    # --- Cache access ---

    def _get_summary_db(self) -> Optional[List[ChapterSummary]]:
        """Cached summary list, or None unless it decodes and is complete"""
        summaries = self._load(SUMMARY_KEY, List[ChapterSummary])
        if summaries is None or len(summaries) != TOTAL_CHAPTERS:
            # A partial list is as good as no list
            return None
        return summaries

    def _get_chapter_db(self, chapter_id: int) -> Optional[Chapter]:
        return self._load(chapter_key(chapter_id), Chapter)

    def _load(self, key: str, shape):
        try:
            return decode(self.cache.get(key), shape)
        except CacheMissError:
            return None
        except StoreError as e:
            print(f"{Fore.YELLOW}Warning: could not read {key!r} from cache: {e}{Style.RESET_ALL}", file=sys.stderr)
            return None
        except DecodeError as e:
            print(f"{Fore.YELLOW}Warning: cached entry {key!r} is unreadable, refreshing ({e}).{Style.RESET_ALL}",
                  file=sys.stderr)
            return None

    def _store(self, key: str, value, shape):
        """Best-effort write-back: failures are reported, never raised"""
        try:
            self.cache.put(key, encode(value, shape))
        except (StoreError, ValueError) as e:
            print(f"{Fore.YELLOW}Warning: could not cache {key!r}: {e}{Style.RESET_ALL}", file=sys.stderr)
