# quranstore/utils.py
import sys
import os

import platformdirs # Use platformdirs for cross-platform path handling

# --- Define constants for platformdirs ---
APP_NAME = "QuranCLI"
APP_AUTHOR = "FadSecLab"
DB_FILE_NAME = "quran.db"


def get_app_dir(subdir: str = '') -> str:
    """
    Writable directory that lives alongside the application.

    Next to the executable in a PyInstaller bundle, the project root when run
    from source. The directory is created if needed.
    """
    if getattr(sys, 'frozen', False):
        base_path = os.path.dirname(sys.executable)
    else:
        # quranstore/ sits in the project root
        base_path = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

    target_dir = os.path.join(base_path, subdir) if subdir else base_path
    os.makedirs(target_dir, exist_ok=True)
    return target_dir


def get_cache_db_path(file_name: str = DB_FILE_NAME) -> str:
    """Default location of the chapter cache database."""
    if sys.platform == "win32":
        # Windows: save next to executable
        return os.path.join(get_app_dir('cache'), file_name)
    # Linux/macOS: use the user's cache directory
    cache_dir = platformdirs.user_cache_dir(APP_NAME, APP_AUTHOR)
    os.makedirs(cache_dir, exist_ok=True)
    return os.path.join(cache_dir, file_name)
