# pathmonitor/watch/patterns.py

"""
Pattern filtering for watch source events
"""
import fnmatch
import logging
from pathlib import Path
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_IGNORE_PATTERNS = [
    # Editor and system droppings
    '*.swp', '*.swo', '*~', '.#*',
    '.DS_Store', 'Thumbs.db', 'desktop.ini',

    # Version control internals
    '.git', '.svn', '.hg',
]


class PatternFilter:
    """
    Drop events for paths whose name, or any parent directory's name,
    matches an ignore pattern
    """

    MAX_CACHED_NAMES = 10000

    def __init__(self, ignore_patterns: Optional[List[str]] = None):
        """
        Args:
            ignore_patterns: fnmatch patterns, matched case-insensitively;
                None selects DEFAULT_IGNORE_PATTERNS
        """
        if ignore_patterns is None:
            ignore_patterns = DEFAULT_IGNORE_PATTERNS
        self.ignore_patterns = [pattern.lower() for pattern in ignore_patterns]

        # name -> matched; the same few directory names recur in every path
        self._name_matches: Dict[str, bool] = {}

        logger.debug(f"PatternFilter initialized with {len(self.ignore_patterns)} patterns")

    def _matches(self, name: str) -> bool:
        name = name.lower()
        matched = self._name_matches.get(name)
        if matched is None:
            matched = any(fnmatch.fnmatchcase(name, pattern) for pattern in self.ignore_patterns)
            if len(self._name_matches) >= self.MAX_CACHED_NAMES:
                self._name_matches.clear()
            self._name_matches[name] = matched
        return matched

    def should_ignore(self, path: Path) -> bool:
        """
        Check if path should be ignored

        Only names are inspected, never the filesystem: a deleted path must
        be filtered the same way it was while it existed.
        """
        if not self.ignore_patterns:
            return False

        return any(self._matches(part.name) for part in (path, *path.parents) if part.name)

    def add_pattern(self, pattern: str):
        """Add a new ignore pattern"""
        self.ignore_patterns.append(pattern.lower())
        self._name_matches.clear()
        logger.info(f"Added ignore pattern: {pattern}")

    def remove_pattern(self, pattern: str):
        """Remove an ignore pattern"""
        pattern = pattern.lower()
        if pattern in self.ignore_patterns:
            self.ignore_patterns.remove(pattern)
            self._name_matches.clear()
            logger.info(f"Removed ignore pattern: {pattern}")
