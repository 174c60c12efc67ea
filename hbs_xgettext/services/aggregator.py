"""
Multi-file extraction.

Resolves a glob pattern, extracts every matching template and merges the
per-file entries by msgid. References of duplicate msgids are concatenated
and sorted, so the result does not depend on the order files are read in.
"""

import glob
import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Optional

from hbs_xgettext.errors import MarkupError, ResolutionError
from hbs_xgettext.services.catalog import CatalogEntry

logger = logging.getLogger(__name__)


def resolve_pattern(pattern: str, options: Optional[Dict[str, Any]] = None) -> List[str]:
    """
    Expand a glob pattern into a sorted list of file paths.

    Args:
        pattern: Glob pattern, ``**`` matches nested directories
        options: Extra keyword arguments for ``glob.glob`` (e.g. ``root_dir``)

    Returns:
        Sorted list of matching file paths, relative to ``root_dir`` if given

    Raises:
        ResolutionError: if the pattern or options cannot be resolved
    """
    glob_options = {'recursive': True}
    glob_options.update(options or {})
    try:
        matches = glob.glob(pattern, **glob_options)
    except (OSError, TypeError, ValueError) as e:
        raise ResolutionError(f"Cannot resolve pattern {pattern!r}: {e}", pattern=pattern) from e

    root_dir = glob_options.get('root_dir')
    files = [path for path in matches
             if os.path.isfile(os.path.join(root_dir, path) if root_dir else path)]
    logger.info(f"Aggregator: Resolved {len(files)} files for pattern {pattern!r}")
    return sorted(files)


def read_sources(paths: List[str], root_dir: Optional[str] = None,
                 encoding: str = 'utf-8', workers: int = 1) -> List[str]:
    """Read template files, returning their contents in the order of ``paths``."""

    def _read(path):
        full_path = os.path.join(root_dir, path) if root_dir else path
        logger.debug(f"Aggregator: Reading {full_path}")
        with open(full_path, 'r', encoding=encoding) as f:
            return f.read()

    if workers > 1 and len(paths) > 1:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            return list(executor.map(_read, paths))
    return [_read(path) for path in paths]


def merge_entries(merged: Dict[str, CatalogEntry],
                  entries: Iterable[CatalogEntry]) -> Dict[str, CatalogEntry]:
    """
    Merge catalog entries into ``merged``, keyed by msgid only.

    The first entry for a msgid is kept; later ones contribute their
    references, which are then sorted as plain strings, so ``a.hbs:10``
    comes before ``a.hbs:9``.

    Raises:
        MarkupError: if two entries carry different non-empty plural forms
    """
    for entry in entries:
        existing = merged.get(entry.msgid)
        if existing is None:
            merged[entry.msgid] = replace(entry, references=list(entry.references or []))
            continue

        plural = entry.msgid_plural
        if plural and existing.msgid_plural and plural != existing.msgid_plural:
            raise MarkupError(
                f'Incompatible plural definitions for msgid "{entry.msgid}" '
                f'("{existing.msgid_plural}" and "{plural}")',
                msgid=entry.msgid,
                values=(existing.msgid_plural, plural),
            )
        if plural and not existing.msgid_plural:
            existing.msgid_plural = plural

        # Join references and sort them
        existing.references = sorted(existing.references + list(entry.references or []))
    return merged


def extract_files(parser, pattern: str, options: Optional[Dict[str, Any]] = None,
                  encoding: str = 'utf-8', workers: int = 1,
                  merged: Optional[Dict[str, CatalogEntry]] = None) -> Dict[str, CatalogEntry]:
    """
    Extract and merge entries from every file matching ``pattern``.

    Args:
        parser: Parser providing ``parse_to_po_messages``
        pattern: Glob pattern
        options: Extra ``glob.glob`` keyword arguments
        encoding: Encoding of the template files
        workers: Number of threads used to read files
        merged: Existing entries to merge into (e.g. from a previous pattern)

    Returns:
        Dict of msgid to merged CatalogEntry, in order of first appearance
    """
    paths = resolve_pattern(pattern, options)
    root_dir = (options or {}).get('root_dir')
    sources = read_sources(paths, root_dir=root_dir, encoding=encoding, workers=workers)

    merged = {} if merged is None else merged
    for path, contents in zip(paths, sources):
        file_messages = parser.parse_to_po_messages(contents, source_path=path)
        logger.debug(f"Aggregator: {len(file_messages)} messages in {path}")
        merge_entries(merged, file_messages)
    return merged
