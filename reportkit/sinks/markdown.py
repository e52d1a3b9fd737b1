from __future__ import annotations

import html
import json
import re
from pathlib import Path
from urllib.parse import quote

from ..sink import Justify, column_justification
from ..storage import write_text_atomic
from .base import BlockSink, TableState


_MARKDOWN_SPECIAL_PATTERN = re.compile(r'([\\`*_\[\]<>|])')
_MAX_HEADING_LEVEL = 6
# anything outside these URL delimiters is percent-encoded in link destinations
_LINK_SAFE_CHARS = "/:?#[]@!$&'*+,;=%~"

_ALIGNMENT_MARKERS: dict[Justify, str] = {
    Justify.left: ':---',
    Justify.center: ':---:',
    Justify.right: '---:',
}


def escape_markdown(text: str) -> str:
    return _MARKDOWN_SPECIAL_PATTERN.sub(r'\\\1', text)


class MarkdownSink(BlockSink):
    """Renders sink events as CommonMark with pipe tables."""

    def __init__(self, output_path: Path | None = None, *, encoding: str = 'utf-8') -> None:
        super().__init__()
        self.output_path = output_path
        self.encoding = encoding
        self._blocks: list[str] = []

    def _escape(self, text: str) -> str:
        return escape_markdown(text)

    def _format_link(self, target: str, label: str) -> str:
        return f'[{label}]({quote(target, safe=_LINK_SAFE_CHARS)})'

    def _emit_paragraph(self, content: str) -> None:
        text = content.strip()
        if text:
            self._blocks.append(text)

    def _emit_verbatim(self, content: str) -> None:
        fence = '````' if '```' in content else '```'
        self._blocks.append(f'{fence}\n{content.rstrip()}\n{fence}')

    def _emit_table(self, table: TableState) -> None:
        width = table.column_count()
        if width == 0:
            if table.caption:
                self._blocks.append(f'*{table.caption}*')
            return

        def row_line(cells: list[str]) -> str:
            padded = [str(cell).replace('\n', ' ').strip() for cell in cells]
            padded.extend([''] * (width - len(padded)))
            return '| ' + ' | '.join(padded) + ' |'

        lines = [row_line(table.rows[0])]
        markers = [_ALIGNMENT_MARKERS[column_justification(table.justification, col)] for col in range(width)]
        lines.append('| ' + ' | '.join(markers) + ' |')
        for row in table.rows[1:]:
            lines.append(row_line(row))
        self._blocks.append('\n'.join(lines))
        if table.caption:
            self._blocks.append(f'*{table.caption}*')

    def begin_document(self, title: str) -> None:
        self._title = title

    def end_document(self) -> None:
        self._flush_loose_text()

    def open_section(self, level: int, title: str, anchor: str | None) -> None:
        self._flush_loose_text()
        heading = '#' * max(1, min(level, _MAX_HEADING_LEVEL)) + ' ' + escape_markdown(title)
        if anchor:
            heading = f'<a id="{html.escape(anchor)}"></a>\n\n{heading}'
        self._blocks.append(heading)

    def close_section(self, level: int) -> None:
        self._flush_loose_text()

    def getvalue(self) -> str:
        parts: list[str] = []
        if self._title is not None:
            parts.append(f'---\ntitle: {json.dumps(self._title, ensure_ascii=False)}\n---')
        parts.extend(self._blocks)
        loose = ''.join(self._buffers[0]).strip()
        if loose:
            parts.append(loose)
        return '\n\n'.join(parts) + '\n'

    def flush(self) -> None:
        if self.output_path is not None:
            write_text_atomic(self.output_path, self.getvalue(), encoding=self.encoding)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.flush()
