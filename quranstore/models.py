# quranstore/models.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, List, Optional, Tuple

TOTAL_CHAPTERS = 114 # Fixed canon size, chapter ids are 1..114


class QuranRecord(BaseModel):
    """Base for every record read from the API or the cache."""
    model_config = ConfigDict(populate_by_name=True)


class TranslatedName(QuranRecord):
    language_name: Optional[str] = None
    name: Optional[str] = None


class Pages(QuranRecord):
    start: int = 0
    end: int = 0


class Translation(QuranRecord):
    id: Optional[int] = None
    language_name: Optional[str] = None
    text: Optional[str] = None
    resource_name: Optional[str] = None
    resource_id: Optional[int] = None


class MediaContent(QuranRecord):
    url: Optional[str] = None
    embed_text: Optional[str] = None
    provider: Optional[str] = None
    author_name: Optional[str] = None


class VerseAudio(QuranRecord):
    url: Optional[str] = None
    duration: Optional[int] = None
    segments: List[List[Any]] = Field(default_factory=list) # [[word_idx, start_ms, end_ms], ...]
    format: Optional[str] = None


class WordAudio(QuranRecord):
    url: Optional[str] = None


class Word(QuranRecord):
    id: Optional[int] = None
    position: int
    text_madani: Optional[str] = None
    text_indopak: Optional[str] = None
    text_simple: Optional[str] = None
    verse_key: str
    class_name: Optional[str] = None
    line_number: Optional[int] = None
    page_number: Optional[int] = None
    code: Optional[str] = None
    code_v3: Optional[str] = None
    char_type: Optional[str] = None     # "word", "end", "pause", ...
    audio: Optional[WordAudio] = None
    translation: Optional[Translation] = None


class Verse(QuranRecord):
    id: int
    verse_number: int
    chapter_id: int
    verse_key: str          # e.g. "2:255"
    text_madani: Optional[str] = None
    text_indopak: Optional[str] = None
    text_simple: Optional[str] = None
    juz_number: Optional[int] = None
    hizb_number: Optional[int] = None
    rub_number: Optional[int] = None
    sajdah: Optional[str] = None        # Only set on prostration verses
    sajdah_number: Optional[int] = None
    page_number: Optional[int] = None
    audio: Optional[VerseAudio] = None
    translations: List[Translation] = Field(default_factory=list)
    media_contents: List[MediaContent] = Field(default_factory=list)
    words: List[Word] = Field(default_factory=list)


class ChapterSummary(QuranRecord):
    id: int
    chapter_number: int
    bismillah_pre: bool = False
    revelation_order: Optional[int] = None
    revelation_place: Optional[str] = None  # "makkah" or "madinah"
    name_complex: Optional[str] = None      # Transliterated name
    name_arabic: Optional[str] = None
    name_simple: Optional[str] = None
    verse_count: int = Field(0, alias="verses_count")
    pages: Tuple[int, int] = (0, 0)         # [start_page, end_page]
    translated_name: TranslatedName = Field(default_factory=TranslatedName)

    @property
    def start_page(self) -> int:
        return self.pages[0]

    @property
    def end_page(self) -> int:
        return self.pages[1]


class Chapter(QuranRecord):
    id: int
    chapter_number: int
    bismillah_pre: bool = False
    revelation_order: Optional[int] = None
    revelation_place: Optional[str] = None
    name_complex: Optional[str] = None
    name_arabic: Optional[str] = None
    name_simple: Optional[str] = None
    pages: Pages = Field(default_factory=Pages)
    translated_name: TranslatedName = Field(default_factory=TranslatedName)
    verses: List[Verse] = Field(default_factory=list)

    @classmethod
    def from_summary(cls, summary: ChapterSummary, verses: List[Verse]) -> "Chapter":
        """Build the full chapter record from its summary and its paged-in verses."""
        return cls(
            id=summary.id,
            chapter_number=summary.chapter_number,
            bismillah_pre=summary.bismillah_pre,
            revelation_order=summary.revelation_order,
            revelation_place=summary.revelation_place,
            name_complex=summary.name_complex,
            name_arabic=summary.name_arabic,
            name_simple=summary.name_simple,
            pages=Pages(start=summary.start_page, end=summary.end_page),
            translated_name=summary.translated_name.model_copy(),
            verses=list(verses),
        )
