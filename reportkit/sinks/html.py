from __future__ import annotations

import html
from datetime import datetime
from pathlib import Path
from typing import Sequence

from ..sink import Justify, column_justification
from ..storage import write_text_atomic


_MAX_HEADING_LEVEL = 6


def _escape(value: str) -> str:
    return html.escape(value, quote=False)


def _escape_attr(value: str) -> str:
    return html.escape(value, quote=True)


class HtmlSink:
    """Writes a standalone HTML5 page."""

    def __init__(
        self,
        output_path: Path | None = None,
        *,
        encoding: str = 'utf-8',
        publish_date: datetime | None = None,
    ) -> None:
        self.output_path = output_path
        self.encoding = encoding
        self.publish_date = publish_date
        self._chunks: list[str] = []
        self._justification: tuple[Justify, ...] = ()
        self._column = 0
        self._cell_tags: list[str] = []
        self._closed = False

    def _write(self, chunk: str) -> None:
        self._chunks.append(chunk)

    def begin_document(self, title: str) -> None:
        self._write('<!DOCTYPE html>\n<html>\n<head>\n')
        self._write(f'<meta charset="{_escape_attr(self.encoding)}">\n')
        self._write(f'<title>{_escape(title)}</title>\n')
        if self.publish_date is not None:
            self._write(f'<meta name="date" content="{self.publish_date.date().isoformat()}">\n')
        self._write('</head>\n<body>\n')

    def end_document(self) -> None:
        self._write('</body>\n</html>\n')

    def open_section(self, level: int, title: str, anchor: str | None) -> None:
        tag = f'h{max(1, min(level, _MAX_HEADING_LEVEL))}'
        id_attr = f' id="{_escape_attr(anchor)}"' if anchor else ''
        self._write(f'<section>\n<{tag}{id_attr}>{_escape(title)}</{tag}>\n')

    def close_section(self, level: int) -> None:
        self._write('</section>\n')

    def text(self, text: str) -> None:
        self._write(_escape(text))

    def raw_text(self, text: str) -> None:
        self._write(text)

    def open_link(self, target: str) -> None:
        self._write(f'<a href="{_escape_attr(target)}">')

    def close_link(self) -> None:
        self._write('</a>')

    def open_paragraph(self) -> None:
        self._write('<p>')

    def close_paragraph(self) -> None:
        self._write('</p>\n')

    def open_verbatim(self) -> None:
        self._write('<pre>')

    def close_verbatim(self) -> None:
        self._write('</pre>\n')

    def open_table(self, justification: Sequence[Justify], grid: bool) -> None:
        self._justification = tuple(justification)
        border = ' border="1"' if grid else ''
        self._write(f'<table class="bodyTable"{border}>\n')

    def close_table(self) -> None:
        self._write('</table>\n')
        self._justification = ()

    def open_table_row(self) -> None:
        self._column = 0
        self._write('<tr>')

    def close_table_row(self) -> None:
        self._write('</tr>\n')

    def open_table_cell(self, header: bool) -> None:
        tag = 'th' if header else 'td'
        align = column_justification(self._justification, self._column).value
        self._cell_tags.append(tag)
        self._write(f'<{tag} style="text-align: {align}">')

    def close_table_cell(self) -> None:
        tag = self._cell_tags.pop() if self._cell_tags else 'td'
        self._column += 1
        self._write(f'</{tag}>')

    def open_table_caption(self) -> None:
        self._write('<caption>')

    def close_table_caption(self) -> None:
        self._write('</caption>\n')

    def getvalue(self) -> str:
        return ''.join(self._chunks)

    def flush(self) -> None:
        if self.output_path is not None:
            write_text_atomic(self.output_path, self.getvalue(), encoding=self.encoding, errors='xmlcharrefreplace')

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.flush()
