# Quran-Fetcher.py
import sys

from quranstore.fetcher_app import main

if __name__ == "__main__":
    sys.exit(main())
