# quranstore/__init__.py
from .version import VERSION

__version__ = VERSION
