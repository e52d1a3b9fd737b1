from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Sequence

from ..sink import Justify


@dataclass
class TableState:
    justification: tuple[Justify, ...]
    grid: bool
    rows: list[list[Any]] = field(default_factory=list)
    header_rows: list[bool] = field(default_factory=list)
    caption: str | None = None
    current_row: list[Any] | None = None
    current_row_header: bool = False

    def column_count(self) -> int:
        return max((len(row) for row in self.rows), default=0)


class BlockSink:
    """Collects inline events into text buffers and hands finished blocks to subclasses.

    Subclasses implement the ``_escape*``/``_format_link`` hooks and the
    ``_emit_*`` block writers.
    """

    def __init__(self) -> None:
        self._buffers: list[list[str]] = [[]]
        self._link_targets: list[str] = []
        self._verbatim = False
        self._table: TableState | None = None
        self._title: str | None = None
        self._closed = False

    # Hooks

    def _escape(self, text: str) -> str:
        raise NotImplementedError

    def _escape_verbatim(self, text: str) -> str:
        return text

    def _format_link(self, target: str, label: str) -> str:
        raise NotImplementedError

    def _emit_paragraph(self, content: str) -> None:
        raise NotImplementedError

    def _emit_verbatim(self, content: str) -> None:
        raise NotImplementedError

    def _emit_table(self, table: TableState) -> None:
        raise NotImplementedError

    # Buffers

    def _push(self) -> None:
        self._buffers.append([])

    def _pop(self) -> str:
        if len(self._buffers) <= 1:
            raise RuntimeError('no open inline buffer')
        return ''.join(self._buffers.pop())

    def _write(self, chunk: str) -> None:
        self._buffers[-1].append(chunk)

    def _flush_loose_text(self) -> None:
        loose = ''.join(self._buffers[0])
        self._buffers[0] = []
        if loose.strip():
            self._emit_paragraph(loose)

    # Inline events

    def text(self, text: str) -> None:
        if self._verbatim:
            self._write(self._escape_verbatim(text))
        else:
            self._write(self._escape(text))

    def raw_text(self, text: str) -> None:
        self._write(text)

    def open_link(self, target: str) -> None:
        self._link_targets.append(target)
        self._push()

    def close_link(self) -> None:
        label = self._pop()
        target = self._link_targets.pop()
        self._write(self._format_link(target, label))

    # Blocks

    def open_paragraph(self) -> None:
        self._flush_loose_text()
        self._push()

    def close_paragraph(self) -> None:
        self._emit_paragraph(self._pop())

    def open_verbatim(self) -> None:
        self._flush_loose_text()
        self._verbatim = True
        self._push()

    def close_verbatim(self) -> None:
        self._verbatim = False
        self._emit_verbatim(self._pop())

    def open_table(self, justification: Sequence[Justify], grid: bool) -> None:
        self._flush_loose_text()
        self._table = TableState(justification=tuple(justification), grid=grid)

    def close_table(self) -> None:
        table = self._table
        self._table = None
        if table is not None:
            self._emit_table(table)

    def open_table_row(self) -> None:
        if self._table is None:
            raise RuntimeError('table row outside of a table')
        self._table.current_row = []
        self._table.current_row_header = False

    def close_table_row(self) -> None:
        table = self._table
        if table is None or table.current_row is None:
            raise RuntimeError('table row was not opened')
        table.rows.append(table.current_row)
        table.header_rows.append(table.current_row_header)
        table.current_row = None

    def open_table_cell(self, header: bool) -> None:
        if self._table is None or self._table.current_row is None:
            raise RuntimeError('table cell outside of a row')
        if header:
            self._table.current_row_header = True
        self._push()

    def close_table_cell(self) -> None:
        content = self._pop()
        if self._table is None or self._table.current_row is None:
            raise RuntimeError('table cell outside of a row')
        self._table.current_row.append(content)

    def open_table_caption(self) -> None:
        self._push()

    def close_table_caption(self) -> None:
        caption = self._pop()
        if self._table is not None:
            self._table.caption = caption
        else:
            self._emit_paragraph(caption)
