"""Version lookup.

An installed package reports its distribution metadata. A plain source
checkout (tests run through conftest's sys.path entry) falls back to the
VERSION file next to this module.
"""

from importlib import metadata
from pathlib import Path

DISTRIBUTION_NAME = "mipview"


def get_version() -> str:
    """Get the version string (e.g. '1.0.0')."""
    try:
        return metadata.version(DISTRIBUTION_NAME)
    except metadata.PackageNotFoundError:
        return _source_version()


def _source_version() -> str:
    version_file = Path(__file__).resolve().parent / "VERSION"
    try:
        major_minor = version_file.read_text().strip()
    except FileNotFoundError:
        major_minor = "0.0"
    return f"{major_minor}.0"
