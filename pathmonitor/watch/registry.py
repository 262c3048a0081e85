# pathmonitor/watch/registry.py

"""
Path-indexed callback registry for one event type
"""
import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

from ..utils.file_utils import normalize_path, is_descendant, iter_subdirectories

logger = logging.getLogger(__name__)

Callback = Callable[[Path], Any]
DirectoryLister = Callable[[Path], Iterable[Path]]


@dataclass(frozen=True)
class Registration:
    """One callback held at a path, and the registration that put it there"""
    callback: Callback
    origin: Path
    recursive: bool = False

    @property
    def key(self) -> Tuple[int, Path]:
        # Identity, not equality: two equal-looking callables are different registrations
        return id(self.callback), self.origin


@dataclass(frozen=True)
class RegistryEntry:
    """Callbacks registered at one path"""
    path: Path
    registrations: Tuple[Registration, ...] = ()
    is_directory: bool = False

    @property
    def callbacks(self) -> Tuple[Callback, ...]:
        return tuple(registration.callback for registration in self.registrations)

    @property
    def recursive(self) -> bool:
        return any(registration.recursive for registration in self.registrations)

    def holds(self, callback: Callback) -> bool:
        return any(registration.callback is callback for registration in self.registrations)

    def with_registration(self, registration: Registration,
                          allow_duplicates: bool = True) -> "RegistryEntry":
        if not allow_duplicates and self.holds(registration.callback):
            return self
        return replace(self, registrations=self.registrations + (registration,))


def _fold(sources: Iterable[Iterable[Registration]]) -> List[Callback]:
    # A recursive registration reaches a path through its own entry and
    # through every copy seeded below it; it fires as many times as the
    # single source holding it most often, not once per copy
    fired: Dict[Tuple[int, Path], int] = {}
    matched: List[Callback] = []
    for registrations in sources:
        held: Dict[Tuple[int, Path], int] = {}
        for registration in registrations:
            key = registration.key
            held[key] = held.get(key, 0) + 1
            if held[key] > fired.get(key, 0):
                fired[key] = held[key]
                matched.append(registration.callback)
    return matched


class CallbackRegistry:
    """
    Copy-on-write mapping of path -> RegistryEntry

    Mutating operations return a new registry and leave the receiver
    untouched, so any reference a reader holds is a complete state.
    """

    def __init__(self, entries: Optional[Mapping[Path, RegistryEntry]] = None, *,
                 allow_duplicates: bool = True,
                 list_directories: Optional[DirectoryLister] = None):
        """
        Initialize registry

        Args:
            entries: Initial entries keyed by normalized path
            allow_duplicates: Append a callback already held at a path again
            list_directories: Enumerates the descendant directories of a path,
                used to seed recursive registrations
        """
        self._entries: Dict[Path, RegistryEntry] = dict(entries or {})
        self.allow_duplicates = allow_duplicates
        self._list_directories = list_directories or iter_subdirectories

    def _derive(self, entries: Dict[Path, RegistryEntry]) -> "CallbackRegistry":
        return CallbackRegistry(
            entries,
            allow_duplicates=self.allow_duplicates,
            list_directories=self._list_directories,
        )

    def _add(self, entries: Dict[Path, RegistryEntry], path: Path,
             registration: Registration, is_directory: bool):
        entry = entries.get(path) or RegistryEntry(path=path, is_directory=is_directory)
        if is_directory and not entry.is_directory:
            entry = replace(entry, is_directory=True)
        entries[path] = entry.with_registration(registration, self.allow_duplicates)

    def with_callback_for(self, path: Union[str, Path], callback: Callback,
                          recursive: bool = False) -> "CallbackRegistry":
        """
        Return a registry in which callback is registered at path

        A recursive registration on a directory also seeds an entry for every
        descendant directory that exists right now. Files are never seeded.

        Args:
            path: File or directory to register
            callback: Callable invoked with the event path
            recursive: Cover the directory subtree

        Returns:
            New registry
        """
        path = normalize_path(path)
        is_directory = path.is_dir()
        entries = dict(self._entries)
        registration = Registration(callback, origin=path, recursive=recursive)

        self._add(entries, path, registration, is_directory)

        if recursive and is_directory:
            seeded = 0
            for directory in self._list_directories(path):
                self._add(entries, normalize_path(directory), registration, True)
                seeded += 1
            logger.debug(f"Seeded {seeded} descendant directories of {path}")

        return self._derive(entries)

    def without_callbacks_for(self, path: Union[str, Path],
                              recursive: bool = False) -> "CallbackRegistry":
        """
        Return a registry with the entry at path removed

        A recursive removal also drops every registered descendant directory
        entry. Files registered on their own inside the tree are kept.

        Args:
            path: Path whose entry is removed
            recursive: Also remove descendant directory entries

        Returns:
            New registry
        """
        path = normalize_path(path)
        entries = dict(self._entries)
        entries.pop(path, None)

        if recursive:
            doomed = [
                entry_path for entry_path, entry in entries.items()
                if entry.is_directory and is_descendant(entry_path, path)
            ]
            for entry_path in doomed:
                del entries[entry_path]

        return self._derive(entries)

    def callbacks_for(self, path: Union[str, Path]) -> Optional[Tuple[Callback, ...]]:
        """Callbacks registered exactly at path, or None"""
        entry = self._entries.get(normalize_path(path))
        if entry is None:
            return None
        return entry.callbacks

    def resolve(self, path: Union[str, Path]) -> List[Callback]:
        """
        Callbacks that fire for an event reported at path

        Sources, in order: the exact entry, the parent directory's entry, and
        the recursive registrations of every ancestor directory (nearest
        first). A recursive registration seen again through the copies it
        seeded into descendant directories is counted once. Registrations
        made separately fire separately, even for the same callable.

        Args:
            path: Path the event was reported at

        Returns:
            Callbacks in dispatch order (empty when nothing matches)
        """
        path = normalize_path(path)
        sources: List[Tuple[Registration, ...]] = []

        exact = self._entries.get(path)
        if exact is not None:
            sources.append(exact.registrations)

        parent = path.parent
        if parent != path:
            parent_entry = self._entries.get(parent)
            if parent_entry is not None:
                sources.append(parent_entry.registrations)

            # Directories created after a recursive registration have no entry
            for ancestor in parent.parents:
                entry = self._entries.get(ancestor)
                if entry is not None and entry.recursive:
                    sources.append(tuple(r for r in entry.registrations if r.recursive))

        return _fold(sources)

    def entries(self) -> Dict[Path, RegistryEntry]:
        return dict(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (str, Path)):
            return False
        return normalize_path(path) in self._entries

    def __iter__(self) -> Iterator[Path]:
        return iter(list(self._entries))

    def __repr__(self):
        return f"CallbackRegistry({len(self._entries)} entries)"
