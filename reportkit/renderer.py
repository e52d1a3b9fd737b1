from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, Sequence

from .errors import UnbalancedSectionError
from .pattern import Segment, is_blank, parse_link_pattern
from .sink import DEFAULT_JUSTIFICATION, Justify, Sink


EMPTY_TEXT = '-'

_SCRIPT_TEMPLATE = '<script>\n{code}</script>'


def display_text(value: str | None) -> str:
    if is_blank(value):
        return EMPTY_TEXT
    return str(value)


def write_text(sink: Sink, value: str | None) -> None:
    sink.text(display_text(value))


def write_link(sink: Sink, href: str, label: str | None) -> None:
    sink.open_link(href)
    write_text(sink, label)
    sink.close_link()


def render_segments(segments: Iterable[Segment], sink: Sink) -> None:
    for segment in segments:
        if segment.target is None:
            write_text(sink, segment.label)
        else:
            write_link(sink, segment.target, segment.label)


def render_link_pattern(text: str | None, sink: Sink) -> None:
    if is_blank(text):
        write_text(sink, text)
        return
    render_segments(parse_link_pattern(text), sink)


class SectionTracker:
    """Keeps section open/close events balanced for one render."""

    def __init__(self, sink: Sink) -> None:
        self._sink = sink
        self._depth = 0

    @property
    def depth(self) -> int:
        return self._depth

    def open(self, name: str | None, anchor: str | None = None) -> int:
        self._depth += 1
        self._sink.open_section(self._depth, display_text(name), None if is_blank(anchor) else anchor)
        return self._depth

    def close(self) -> int:
        if self._depth <= 0:
            raise UnbalancedSectionError('Too many closing sections')
        self._sink.close_section(self._depth)
        self._depth -= 1
        return self._depth


class ReportRenderer(ABC):
    """Base for report bodies: subclasses provide ``title`` and ``render_body``.

    The helpers wrap the sink so that report code reads as a sequence of
    sections, tables and paragraphs. Cell text goes through the link
    pattern parser, so ``'{Apache, https://apache.org}'`` renders as a link.
    """

    def __init__(self, sink: Sink) -> None:
        self.sink = sink
        self.sections = SectionTracker(sink)

    @property
    @abstractmethod
    def title(self) -> str | None:
        raise NotImplementedError

    @abstractmethod
    def render_body(self) -> None:
        raise NotImplementedError

    def render(self) -> None:
        self.sink.begin_document(display_text(self.title))
        self.render_body()
        self.sink.end_document()
        self.sink.flush()
        self.sink.close()

    # Sections

    def start_section(self, name: str | None, anchor: str | None = None) -> None:
        self.sections.open(name, name if anchor is None else anchor)

    def end_section(self) -> None:
        self.sections.close()

    # Tables

    def start_table(self, justification: Sequence[Justify] | None = None, grid: bool = False) -> None:
        self.sink.open_table(tuple(justification or DEFAULT_JUSTIFICATION), grid)

    def end_table(self) -> None:
        self.sink.close_table()

    def table_header_cell(self, text: str | None) -> None:
        self.sink.open_table_cell(True)
        self.text(text)
        self.sink.close_table_cell()

    def table_cell(self, text: str | None, as_html: bool = False) -> None:
        self.sink.open_table_cell(False)
        if as_html:
            self.sink.raw_text(text or '')
        else:
            self.link_patterned_text(text)
        self.sink.close_table_cell()

    def table_row(self, content: Sequence[str | None] | None) -> None:
        self.sink.open_table_row()
        for cell in content or ():
            self.table_cell(cell)
        self.sink.close_table_row()

    def table_header(self, content: Sequence[str | None] | None) -> None:
        self.sink.open_table_row()
        for cell in content or ():
            self.table_header_cell(cell)
        self.sink.close_table_row()

    def table_caption(self, caption: str | None) -> None:
        self.sink.open_table_caption()
        self.text(caption)
        self.sink.close_table_caption()

    # Text blocks

    def paragraph(self, paragraph: str | None) -> None:
        self.sink.open_paragraph()
        self.text(paragraph)
        self.sink.close_paragraph()

    def patterned_paragraph(self, paragraph: str | None) -> None:
        self.sink.open_paragraph()
        self.link_patterned_text(paragraph)
        self.sink.close_paragraph()

    def link(self, href: str, name: str | None) -> None:
        write_link(self.sink, href, name)

    def text(self, text: str | None) -> None:
        write_text(self.sink, text)

    def verbatim_text(self, text: str | None) -> None:
        self.sink.open_verbatim()
        self.text(text)
        self.sink.close_verbatim()

    def verbatim_link(self, text: str | None, href: str | None) -> None:
        if is_blank(href):
            self.verbatim_text(text)
            return
        self.sink.open_verbatim()
        self.link(href, text)
        self.sink.close_verbatim()

    def javascript(self, code: str) -> None:
        self.sink.raw_text(_SCRIPT_TEMPLATE.format(code=code))

    def link_patterned_text(self, text: str | None) -> None:
        render_link_pattern(text, self.sink)
