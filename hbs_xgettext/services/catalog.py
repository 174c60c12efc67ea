"""
Catalog entries and POT serialization.

Entries are handed to Babel's Catalog and written with ``write_po``; this
module only builds the entry list and the header fields.
"""

import io
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from babel.messages.catalog import Catalog
from babel.messages.pofile import write_po

logger = logging.getLogger(__name__)


@dataclass
class CatalogEntry:
    """One translatable unit of the output catalog."""

    msgid: str
    msgid_plural: Optional[str] = None
    msgctxt: Optional[str] = None
    references: Optional[List[str]] = None


def reference_to_location(reference: str) -> Tuple[str, Optional[int]]:
    """Split a ``file:line`` reference into a Babel location tuple."""
    filename, separator, line = reference.rpartition(':')
    if separator and line.isdigit():
        return filename, int(line)
    return reference, None


def build_catalog(entries: Iterable[CatalogEntry], project: Optional[str] = None,
                  version: Optional[str] = None, copyright_holder: Optional[str] = None,
                  msgid_bugs_address: Optional[str] = None) -> Catalog:
    """
    Build a Babel catalog template from extracted entries.

    Args:
        entries: Ordered catalog entries
        project: Project name for the header
        version: Project version for the header
        copyright_holder: Copyright holder for the header comment
        msgid_bugs_address: Report-Msgid-Bugs-To header value

    Returns:
        Catalog with a ``text/plain; charset=utf-8`` content type
    """
    catalog = Catalog(
        project=project,
        version=version,
        copyright_holder=copyright_holder,
        msgid_bugs_address=msgid_bugs_address,
        charset='utf-8',
    )

    for entry in entries:
        if not entry.msgid:
            # an empty msgid would replace the catalog header
            logger.warning(f"Catalog: Skipping empty msgid at {entry.references or 'unknown location'}")
            continue

        msgid = entry.msgid
        if entry.msgid_plural is not None:
            msgid = (entry.msgid, entry.msgid_plural)

        locations = [reference_to_location(ref) for ref in entry.references or ()]
        catalog.add(msgid, locations=locations, context=entry.msgctxt)

    return catalog


def write_pot(fileobj, entries: Iterable[CatalogEntry], width: int = 76, **header) -> None:
    """Serialize entries as a POT file into a binary file object."""
    catalog = build_catalog(entries, **header)
    write_po(fileobj, catalog, width=width)


def messages_to_pot(entries: Iterable[CatalogEntry], width: int = 76, **header) -> str:
    """Return the POT file contents for the given entries."""
    buf = io.BytesIO()
    write_pot(buf, entries, width=width, **header)
    return buf.getvalue().decode('utf-8')
