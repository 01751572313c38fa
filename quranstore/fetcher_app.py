# quranstore/fetcher_app.py
import argparse
import concurrent.futures
import sys
from typing import Dict, List, Optional, Sequence

import tqdm
from colorama import Fore, Style, init

from .models import TOTAL_CHAPTERS, Chapter, ChapterSummary
from .quran_api_client import QuranAPIClient, QuranAPIError
from .quran_cache import SUMMARY_KEY, QuranCache, StoreError, chapter_key
from .quran_service import QuranService
from .version import VERSION


class QuranFetcherApp:
    """Fills the local cache with every chapter and reports what it got"""

    def __init__(self, service: QuranService, workers: int = 1):
        self.service = service
        self.workers = max(1, workers)

    def purge_chapters(self, chapter_ids: Sequence[int]) -> List[int]:
        """Evict the given chapters. Returns the ids that could not be deleted."""
        failed = []
        for chapter_id in chapter_ids:
            try:
                self.service.delete_chapter(chapter_id)
                print(f"{Fore.CYAN}Removed chapter {chapter_id} from cache.")
            except StoreError as e:
                print(f"{Fore.RED}Error: could not delete chapter {chapter_id}: {e}{Style.RESET_ALL}", file=sys.stderr)
                failed.append(chapter_id)
        return failed

    def _fetch_single_chapter(self, chapter_id: int) -> Optional[Chapter]:
        try:
            return self.service.get_chapter(chapter_id)
        except QuranAPIError as e:
            print(f"{Fore.RED}Error: chapter {chapter_id}: {e}{Style.RESET_ALL}", file=sys.stderr)
            return None

    def fetch_chapters(self, summaries: List[ChapterSummary]) -> Dict[int, Chapter]:
        """Fetch every summarized chapter, in parallel when workers > 1"""
        chapters: Dict[int, Chapter] = {}
        failed = set()

        with concurrent.futures.ThreadPoolExecutor(max_workers=self.workers) as executor:
            chapter_ids = dict.fromkeys(s.id for s in summaries)
            futures = {executor.submit(self._fetch_single_chapter, i): i for i in chapter_ids}
            try:
                with tqdm.tqdm(total=len(futures), desc="Chapters", unit="chapter",
                               file=sys.stderr, leave=False) as pbar:
                    for future in concurrent.futures.as_completed(futures):
                        chapter_id = futures[future]
                        chapter = future.result()
                        if chapter is None:
                            failed.add(chapter_id)
                        else:
                            chapters[chapter_id] = chapter
                        pbar.update(1)
            except KeyboardInterrupt:
                # Drop queued chapters; only the ones already running finish
                executor.shutdown(wait=False, cancel_futures=True)
                raise

        # Retry failed downloads once, one at a time
        if failed:
            print(Fore.YELLOW + f"\nRetrying {len(failed)} failed chapter(s)...")
            for chapter_id in sorted(failed):
                chapter = self._fetch_single_chapter(chapter_id)
                if chapter is not None:
                    chapters[chapter_id] = chapter
                    print(Fore.GREEN + f"Successfully fetched chapter {chapter_id}")
        return chapters

    def report(self, chapters: Dict[int, Chapter]):
        for chapter_id in sorted(chapters):
            chapter = chapters[chapter_id]
            print(f'num={chapter.chapter_number} chapter="{chapter.name_simple}" num_verses={len(chapter.verses)}')

    def show_status(self):
        """List which chapters are cached, without touching the network"""
        keys = set(self.service.cache.keys())
        cached = [i for i in range(1, TOTAL_CHAPTERS + 1) if chapter_key(i) in keys]
        missing = TOTAL_CHAPTERS - len(cached)
        summary_state = "present" if SUMMARY_KEY in keys else "missing"
        print(f"{Fore.CYAN}Cache: {self.service.cache.path}")
        print(f"{Fore.CYAN}Chapter summaries: {summary_state}")
        print(f"{Fore.GREEN}Chapters cached: {len(cached)}/{TOTAL_CHAPTERS}")
        if missing:
            print(f"{Fore.YELLOW}Chapters missing: {missing}")

    def run(self, purge: Sequence[int] = ()) -> int:
        self.purge_chapters(purge)

        summaries = self.service.get_chapters_summary()
        chapters = self.fetch_chapters(summaries)
        self.report(chapters)

        missing = len({s.id for s in summaries} - set(chapters))
        if missing:
            print(f"{Fore.RED}{missing} chapter(s) could not be fetched.{Style.RESET_ALL}", file=sys.stderr)
            return 1
        print(Fore.GREEN + f"\n✓ All {len(chapters)} chapters available in cache!")
        return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="quran-fetcher",
        description="Fetch Quran chapters from the API into a local cache.",
    )
    parser.add_argument("--db", help="Path to the cache database (default: user cache dir)")
    parser.add_argument("--base-url", default=QuranAPIClient.BASE_URL, help="API base URL")
    parser.add_argument("--timeout", type=float, default=QuranAPIClient.TIMEOUT,
                        help="Per-request timeout in seconds")
    parser.add_argument("--purge", type=int, nargs="+", default=[], metavar="ID",
                        help="Chapter ids to evict from the cache before fetching")
    parser.add_argument("--workers", type=int, default=1,
                        help="Chapters fetched in parallel (default: 1)")
    parser.add_argument("--status", action="store_true",
                        help="Show what is cached and exit")
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    init(autoreset=True)
    args = build_parser().parse_args(argv)

    try:
        with QuranCache(args.db) as cache:
            client = QuranAPIClient(base_url=args.base_url, timeout=args.timeout)
            app = QuranFetcherApp(QuranService(client, cache), workers=args.workers)
            if args.status:
                app.show_status()
                return 0
            return app.run(purge=args.purge)
    except StoreError as e:
        print(f"{Fore.RED}Fatal: cache database error: {e}{Style.RESET_ALL}", file=sys.stderr)
        return 2
    except QuranAPIError as e:
        print(f"{Fore.RED}Fatal: could not fetch chapter list: {e}{Style.RESET_ALL}", file=sys.stderr)
        return 2
    except KeyboardInterrupt:
        print(f"\n{Fore.YELLOW}Interrupted. Chapters fetched so far stay cached.{Style.RESET_ALL}")
        return 130


if __name__ == "__main__":
    sys.exit(main())
