"""Embedded script documents inside scene container files.

Scene files (``.tscn``) can inline a script as a quoted, escaped string::

    [sub_resource type="GDScript" id="GDScript_x1y2z"]
    script/source = "extends Node

    func _ready():
        print(\\"hi\\")
    "

    [node name="Main" type="Node"]
    script = SubResource("GDScript_x1y2z")

This module finds such payloads with a three-state forward scan, names each
one after the node(s) using it, and translates positions between container
coordinates (physical lines, escaped text) and document coordinates
(payload-local lines, un-escaped text) so the plain scanner and replacer can
run on the payload unchanged.
"""

from __future__ import annotations

import bisect
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from enum import Enum, auto
from pathlib import Path
from typing import BinaryIO

from findscan.escapes import escape, unescape
from findscan.line_reader import LineReader, read_lines, strip_terminator
from findscan.plain import DEFAULT_OPTIONS, replace_stream, scan_stream
from findscan.scan_types import (
    MatchRecord,
    ReplaceLocation,
    ReplaceSummary,
    ScanOptions,
    SubDocument,
)

log = logging.getLogger(__name__)

COMPOSITE_SEPARATOR = "::"
LABEL_SEPARATOR = "|"
ROOT_PARENT = "."


# ---------------------------------------------------------------------------
# Format description
# ---------------------------------------------------------------------------


class ExtractorState(Enum):
    """What the forward scan is waiting for next."""

    AWAIT_CONTAINER_ENTRY = auto()
    AWAIT_PAYLOAD_START = auto()
    AWAIT_PAYLOAD_END = auto()


@dataclass(frozen=True, slots=True)
class ContainerFormat:
    """Line markers of a container format. All markers match at line start."""

    extensions: tuple[str, ...] = (".tscn",)
    declaration_marker: str = '[sub_resource type="GDScript" id="'
    payload_open_marker: str = 'script/source = "'
    payload_close_marker: str = '"'
    element_marker: str = '[node name="'
    element_parent_marker: str = ' parent="'
    usage_marker: str = 'script = SubResource("'
    quote: str = '"'

    def marker_for(self, state: ExtractorState) -> str:
        if state is ExtractorState.AWAIT_CONTAINER_ENTRY:
            return self.declaration_marker
        if state is ExtractorState.AWAIT_PAYLOAD_START:
            return self.payload_open_marker
        return self.payload_close_marker

    def handles(self, path: str | Path) -> bool:
        return Path(path).suffix.lower() in self.extensions


SCENE_FORMAT = ContainerFormat()


def _quoted_value(line: str, marker: str, quote: str) -> str | None:
    """Text between ``marker`` and the next ``quote``, or None without marker."""
    _, found, rest = line.partition(marker)
    if not found:
        return None
    return rest.split(quote, 1)[0]


def composite_path(container_path: str, identifier: str) -> str:
    return f"{container_path}{COMPOSITE_SEPARATOR}{identifier}"


def split_composite_path(file_path: str) -> tuple[str, str] | None:
    """Split ``<container>::<identifier>``; None when ``file_path`` is not composite."""
    container_path, found, identifier = file_path.rpartition(COMPOSITE_SEPARATOR)
    if not found or not container_path or not identifier:
        return None
    return container_path, identifier


def display_label(container_path: str, doc: SubDocument) -> str:
    return composite_path(container_path, doc.label or doc.identifier)


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class NamedElement:
    """A structural element declaration and the line it sits on."""

    line_index: int
    path: str


@dataclass(slots=True)
class _SubDocumentAccumulator:
    """Partial sub-document while its payload is being located."""

    identifier: str = ""
    start_line: int = -1

    def reset(self) -> None:
        self.identifier = ""
        self.start_line = -1


@dataclass(slots=True)
class _ContainerOutline:
    """Everything one forward pass learns about a container."""

    spans: dict[str, tuple[int, int]] = field(default_factory=dict)
    elements: list[NamedElement] = field(default_factory=list)
    labels: dict[str, list[str]] = field(default_factory=dict)


def parse_named_element(
    line: str, line_index: int, fmt: ContainerFormat = SCENE_FORMAT,
) -> NamedElement | None:
    """Parse a named-element declaration into its full ``parent/name`` path."""
    if not line.startswith(fmt.element_marker):
        return None
    name = _quoted_value(line, fmt.element_marker, fmt.quote) or ""
    parent = _quoted_value(line, fmt.element_parent_marker, fmt.quote) or ""
    if parent and parent != ROOT_PARENT:
        return NamedElement(line_index, f"{parent}/{name}")
    return NamedElement(line_index, name)


def parse_usage_reference(line: str, fmt: ContainerFormat = SCENE_FORMAT) -> str | None:
    """Identifier referenced by a usage line, or None."""
    if not line.startswith(fmt.usage_marker):
        return None
    return _quoted_value(line, fmt.usage_marker, fmt.quote)


def nearest_element_before(elements: list[NamedElement], line_index: int) -> NamedElement | None:
    """Closest element declared strictly before ``line_index``.

    ``elements`` must be ordered by line index, which a forward pass gives.
    """
    keys = [element.line_index for element in elements]
    idx = bisect.bisect_left(keys, line_index) - 1
    if idx < 0:
        return None
    return elements[idx]


def _scan_outline(lines: Iterable[str], fmt: ContainerFormat) -> _ContainerOutline:
    outline = _ContainerOutline()
    state = ExtractorState.AWAIT_CONTAINER_ENTRY
    acc = _SubDocumentAccumulator()

    for line_index, raw_line in enumerate(lines, start=1):
        line = strip_terminator(raw_line)
        marker = fmt.marker_for(state)

        if line.startswith(marker):
            if state is ExtractorState.AWAIT_CONTAINER_ENTRY:
                acc.identifier = _quoted_value(line, marker, fmt.quote) or ""
                state = ExtractorState.AWAIT_PAYLOAD_START
            elif state is ExtractorState.AWAIT_PAYLOAD_START:
                acc.start_line = line_index
                state = ExtractorState.AWAIT_PAYLOAD_END
            else:
                outline.spans[acc.identifier] = (acc.start_line, line_index)
                outline.labels.setdefault(acc.identifier, [])
                acc.reset()
                state = ExtractorState.AWAIT_CONTAINER_ENTRY
            continue

        element = parse_named_element(line, line_index, fmt)
        if element is not None:
            outline.elements.append(element)
            continue

        identifier = parse_usage_reference(line, fmt)
        if identifier is not None and identifier in outline.spans:
            owner = nearest_element_before(outline.elements, line_index)
            if owner is not None:
                outline.labels[identifier].append(owner.path)

    if state is not ExtractorState.AWAIT_CONTAINER_ENTRY:
        log.debug("Unterminated sub-document %r ignored", acc.identifier)
    return outline


def extract_sub_documents(
    stream: BinaryIO, fmt: ContainerFormat = SCENE_FORMAT,
) -> dict[str, SubDocument]:
    """Locate every embedded document in a container, keyed by identifier.

    The stream is rewound and read in a single forward pass. Each
    document's label joins the paths of the elements referencing it with
    ``LABEL_SEPARATOR``.
    """
    stream.seek(0)
    outline = _scan_outline(LineReader(stream), fmt)
    return {
        identifier: SubDocument(
            identifier=identifier,
            start_line=start_line,
            end_line=end_line,
            label=LABEL_SEPARATOR.join(outline.labels.get(identifier, [])),
        )
        for identifier, (start_line, end_line) in outline.spans.items()
    }


# ---------------------------------------------------------------------------
# Coordinate translation
# ---------------------------------------------------------------------------


def to_document_record(
    record: MatchRecord, fmt: ContainerFormat = SCENE_FORMAT,
) -> MatchRecord | None:
    """Translate a raw payload match into document coordinates.

    On the payload-opening line (document line 1) the opening marker is not
    part of the document: matches starting inside it are dropped, others
    lose the marker length. The line is then un-escaped and the span
    remapped. Returns None for dropped matches.
    """
    line = record.line_text
    begin, end = record.begin, record.end
    if record.line_number == 1:
        marker_len = len(fmt.payload_open_marker)
        if begin < marker_len:
            return None
        line = line[marker_len:]
        begin -= marker_len
        end -= marker_len

    unescaped = unescape(line)
    begin, end = unescaped.to_unescaped_span(begin, end)
    return replace(record, begin=begin, end=end, line_text=unescaped.text)


def to_container_location(
    location: ReplaceLocation,
    doc: SubDocument,
    lines: list[str],
    fmt: ContainerFormat = SCENE_FORMAT,
) -> ReplaceLocation | None:
    """Inverse of ``to_document_record`` for a replace location.

    Line numbers stay document-local; the replacer applies
    ``doc.line_offset``. Returns None for locations that no longer fit
    inside the payload.
    """
    line_index = doc.line_offset + location.line_number
    if line_index >= doc.end_line or line_index > len(lines):
        return None

    raw_line = strip_terminator(lines[line_index - 1])
    prefix = 0
    if location.line_number == 1:
        prefix = len(fmt.payload_open_marker)
        raw_line = raw_line[prefix:]

    unescaped = unescape(raw_line)
    if location.end > len(unescaped.text):
        return None
    begin, end = unescaped.to_raw_span(location.begin, location.end)
    return ReplaceLocation(location.line_number, begin + prefix, end + prefix)


# ---------------------------------------------------------------------------
# Scan / replace
# ---------------------------------------------------------------------------


def scan_container(
    stream: BinaryIO,
    container_path: str,
    pattern: str,
    options: ScanOptions = DEFAULT_OPTIONS,
    fmt: ContainerFormat = SCENE_FORMAT,
) -> list[MatchRecord]:
    """Scan every embedded document of a container for ``pattern``.

    Records carry ``<container>::<identifier>`` as file path, document-local
    line numbers and un-escaped line text.
    """
    if not pattern:
        raise ValueError("Cannot scan for an empty pattern")

    # Payloads are stored escaped, so look for the pattern as stored.
    stored_pattern = escape(pattern)
    matches: list[MatchRecord] = []
    for doc in extract_sub_documents(stream, fmt).values():
        stream.seek(0)
        raw_records = scan_stream(
            stream,
            composite_path(container_path, doc.identifier),
            display_label(container_path, doc),
            stored_pattern,
            options,
            doc.scan_range,
        )
        for raw_record in raw_records:
            record = to_document_record(raw_record, fmt)
            if record is not None:
                matches.append(record)
    return matches


def replace_container(
    stream: BinaryIO,
    file_path: str,
    output_path: Path,
    locations: Iterable[ReplaceLocation],
    options: ScanOptions,
    search_text: str,
    new_text: str,
    fmt: ContainerFormat = SCENE_FORMAT,
) -> ReplaceSummary:
    """Replay document-coordinate locations against the container file.

    ``file_path`` is the composite path reported by ``scan_container``; it
    selects which embedded document the locations belong to.
    """
    locations = list(locations)
    parts = split_composite_path(file_path)
    doc = None
    if parts is not None:
        doc = extract_sub_documents(stream, fmt).get(parts[1])
    if doc is None:
        log.warning("No embedded document matches %s, replace will be ignored", file_path)
        return ReplaceSummary(skipped=len(locations))

    stream.seek(0)
    lines = read_lines(stream)
    container_locations: list[ReplaceLocation] = []
    out_of_payload = 0
    for location in locations:
        translated = to_container_location(location, doc, lines, fmt)
        if translated is None:
            log.info(
                "Occurrence outside embedded document, replace will be ignored in %s: line %d",
                file_path, location.line_number,
            )
            out_of_payload += 1
            continue
        container_locations.append(translated)

    stream.seek(0)
    summary = replace_stream(
        stream,
        output_path,
        container_locations,
        options,
        escape(search_text),
        escape(new_text),
        line_offset=doc.line_offset,
    )
    return summary + ReplaceSummary(skipped=out_of_payload)
