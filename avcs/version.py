"""
Bot version information.

Semantic versioning: MAJOR.MINOR.PATCH
- MAJOR: Incompatible API changes
- MINOR: Backwards-compatible functionality additions
- PATCH: Backwards-compatible bug fixes
"""

__version__ = "1.2.0"
__version_info__ = (1, 2, 0)

# Version history
VERSION_HISTORY = {
    "1.2.0": "Channel status formatting is configurable (include_counts, list_all_games) instead of hard-coded flags; ties sort alphabetically",
    "1.1.0": "Strip trademark glyphs from game names, per-channel update serialization, /avcs hello",
    "1.0.0": "Initial version - voice channel status from member game activity with REST fallback",
}


def get_version() -> str:
    """Get the current bot version string."""
    return __version__
