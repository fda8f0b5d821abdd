"""pkgsmith: build native installer packages from populated install trees."""

from __future__ import annotations

from pkgsmith.__version__ import __version__

__all__ = ["__version__"]
