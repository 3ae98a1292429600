"""Resolve import specifiers to files on disk."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Union

from .config import DEFAULT_EXTENSIONS, INDENTATION_EXTENSIONS, PYTHON_EXTENSIONS
from .parser import SyntaxFamily, is_builtin_module, is_relative_import

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def _family_of(from_file: str) -> SyntaxFamily:
    if os.path.splitext(from_file)[1].lower() in INDENTATION_EXTENSIONS:
        return SyntaxFamily.INDENTATION
    return SyntaxFamily.CURLY_BRACE


def _curly_candidates(base: str, extensions: Sequence[str]) -> Iterator[str]:
    yield base
    for ext in extensions:
        yield base + ext
    for ext in extensions:
        yield os.path.join(base, "index" + ext)


def _python_candidates(base: str, has_module: bool, extensions: Sequence[str]) -> Iterator[str]:
    if has_module:
        for ext in extensions:
            yield base + ext
    for ext in extensions:
        yield os.path.join(base, "__init__" + ext)


def _first_file(candidates: Iterator[str]) -> Optional[str]:
    for candidate in candidates:
        if os.path.isfile(candidate):
            return os.path.normpath(candidate)
    return None


def resolve_import(
    specifier: str,
    from_file: PathLike,
    base_dir: Optional[PathLike] = None,
    extensions: Optional[Sequence[str]] = None,
    python_extensions: Optional[Sequence[str]] = None,
) -> Optional[str]:
    """Resolve *specifier* as written in *from_file* to an existing file.

    The importing file's extension selects the resolution rules. Returns a
    normalised path, or None for builtins, packages and anything that does
    not exist on disk.
    """
    from_file = str(from_file)
    family = _family_of(from_file)
    from_dir = os.path.dirname(from_file)

    if family is SyntaxFamily.INDENTATION:
        exts = list(python_extensions or PYTHON_EXTENSIONS)
        dots = len(specifier) - len(specifier.lstrip("."))
        rest = specifier[dots:]
        if dots:
            base = from_dir
            for _ in range(dots - 1):
                base = os.path.dirname(base)
        elif base_dir is not None and rest:
            base = str(base_dir)
        else:
            return None
        parts: List[str] = [p for p in rest.split(".") if p]
        target = os.path.join(base, *parts) if parts else base
        resolved = _first_file(_python_candidates(target, bool(parts), exts))
    else:
        if is_builtin_module(specifier, family) or not is_relative_import(specifier, family):
            return None
        exts = list(extensions or DEFAULT_EXTENSIONS)
        target = os.path.join(from_dir, specifier)
        resolved = _first_file(_curly_candidates(target, exts))

    if resolved is None:
        logger.debug("Unresolved import '%s' from %s", specifier, from_file)
    return resolved


class ImportResolver:
    """Holds resolution options so callers can resolve repeatedly."""

    def __init__(
        self,
        base_dir: Optional[PathLike] = None,
        extensions: Optional[Sequence[str]] = None,
        python_extensions: Optional[Sequence[str]] = None,
    ) -> None:
        self.base_dir = str(base_dir) if base_dir is not None else None
        self.extensions = list(extensions or DEFAULT_EXTENSIONS)
        self.python_extensions = list(python_extensions or PYTHON_EXTENSIONS)

    def resolve(self, specifier: str, from_file: PathLike) -> Optional[str]:
        return resolve_import(
            specifier,
            from_file,
            base_dir=self.base_dir,
            extensions=self.extensions,
            python_extensions=self.python_extensions,
        )
