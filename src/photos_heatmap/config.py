from __future__ import annotations

from pathlib import Path


PHOTOS_LIBRARY_NAME = "Photos Library.photoslibrary"
DEFAULT_LIBRARY_PATH = Path.home() / "Pictures" / PHOTOS_LIBRARY_NAME
LIBRARY_PATH_ENV = "PHOTOS_LIBRARY_PATH"
DATABASE_PATH_ENV = "PHOTOS_DB_PATH"

# Relative to the library root, tried in order.
DATABASE_CANDIDATES = (
    Path("database") / "Photos.sqlite",
    Path("database") / "photos.db",
    Path("Photos.sqlite"),
    Path("database") / "Photos.db",
    Path("database") / "search" / "psi.sqlite",
)

# Seconds between 1970-01-01T00:00:00Z and 2001-01-01T00:00:00Z.
APPLE_EPOCH_OFFSET = 978307200

FALLBACK_CENTER = (35.6762, 139.6503)
DEFAULT_ZOOM = 10
BOUNDS_PADDING = 0.1
DOCUMENT_TITLE = "Photos Location Heatmap"
HEAT_LAYER_OPTIONS = {
    "radius": 25,
    "blur": 15,
    "max_zoom": 17,
    "gradient": {
        0.0: "blue",
        0.2: "cyan",
        0.4: "lime",
        0.6: "yellow",
        0.8: "orange",
        1.0: "red",
    },
}

SUPPORTED_FORMATS = ("html",)
DEFAULT_FORMAT = "html"
DEFAULT_OUTPUT = "./heatmap.html"
DEFAULT_TEST_OUTPUT = "./test-heatmap.html"
EXPLORE_MAX_DEPTH = 2
