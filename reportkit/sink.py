from __future__ import annotations

from enum import Enum
from typing import Any, Protocol, Sequence


class Justify(str, Enum):
    left = 'left'
    center = 'center'
    right = 'right'


DEFAULT_JUSTIFICATION: tuple[Justify, ...] = (Justify.left,)


def column_justification(justification: Sequence[Justify] | None, column: int) -> Justify:
    if not justification:
        return Justify.left
    if column < len(justification):
        return Justify(justification[column])
    return Justify(justification[-1])


class Sink(Protocol):
    """Structured output consumer driven by report renderers.

    Events arrive strictly in document order; every ``open_*`` call is
    matched by its ``close_*`` counterpart.
    """

    def begin_document(self, title: str) -> None: ...

    def end_document(self) -> None: ...

    def open_section(self, level: int, title: str, anchor: str | None) -> None: ...

    def close_section(self, level: int) -> None: ...

    def text(self, text: str) -> None: ...

    def raw_text(self, text: str) -> None: ...

    def open_link(self, target: str) -> None: ...

    def close_link(self) -> None: ...

    def open_paragraph(self) -> None: ...

    def close_paragraph(self) -> None: ...

    def open_verbatim(self) -> None: ...

    def close_verbatim(self) -> None: ...

    def open_table(self, justification: Sequence[Justify], grid: bool) -> None: ...

    def close_table(self) -> None: ...

    def open_table_row(self) -> None: ...

    def close_table_row(self) -> None: ...

    def open_table_cell(self, header: bool) -> None: ...

    def close_table_cell(self) -> None: ...

    def open_table_caption(self) -> None: ...

    def close_table_caption(self) -> None: ...

    def flush(self) -> None: ...

    def close(self) -> None: ...


class EventSink:
    """Sink that records every event as a ``(name, *args)`` tuple."""

    def __init__(self) -> None:
        self.events: list[tuple[Any, ...]] = []
        self.closed = False

    def _record(self, name: str, *args: Any) -> None:
        self.events.append((name, *args))

    def texts(self) -> list[str]:
        return [event[1] for event in self.events if event[0] == 'text']

    def begin_document(self, title: str) -> None:
        self._record('begin_document', title)

    def end_document(self) -> None:
        self._record('end_document')

    def open_section(self, level: int, title: str, anchor: str | None) -> None:
        self._record('open_section', level, title, anchor)

    def close_section(self, level: int) -> None:
        self._record('close_section', level)

    def text(self, text: str) -> None:
        self._record('text', text)

    def raw_text(self, text: str) -> None:
        self._record('raw_text', text)

    def open_link(self, target: str) -> None:
        self._record('open_link', target)

    def close_link(self) -> None:
        self._record('close_link')

    def open_paragraph(self) -> None:
        self._record('open_paragraph')

    def close_paragraph(self) -> None:
        self._record('close_paragraph')

    def open_verbatim(self) -> None:
        self._record('open_verbatim')

    def close_verbatim(self) -> None:
        self._record('close_verbatim')

    def open_table(self, justification: Sequence[Justify], grid: bool) -> None:
        self._record('open_table', tuple(justification), grid)

    def close_table(self) -> None:
        self._record('close_table')

    def open_table_row(self) -> None:
        self._record('open_table_row')

    def close_table_row(self) -> None:
        self._record('close_table_row')

    def open_table_cell(self, header: bool) -> None:
        self._record('open_table_cell', header)

    def close_table_cell(self) -> None:
        self._record('close_table_cell')

    def open_table_caption(self) -> None:
        self._record('open_table_caption')

    def close_table_caption(self) -> None:
        self._record('close_table_caption')

    def flush(self) -> None:
        self._record('flush')

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._record('close')
