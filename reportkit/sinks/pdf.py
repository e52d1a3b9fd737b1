from __future__ import annotations

import logging
from pathlib import Path
from xml.sax.saxutils import escape, quoteattr

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_LEFT, TA_RIGHT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, StyleSheet1, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle, XPreformatted

from ..sink import Justify, column_justification
from .base import BlockSink, TableState


logger = logging.getLogger(__name__)

_MAX_HEADING_LEVEL = 6

_CELL_ALIGNMENT: dict[Justify, int] = {
    Justify.left: TA_LEFT,
    Justify.center: TA_CENTER,
    Justify.right: TA_RIGHT,
}


def _build_styles(
    *,
    font_name: str,
    mono_font_name: str,
    title_font_size: int,
    body_font_size: int,
) -> StyleSheet1:
    base = getSampleStyleSheet()
    styles = StyleSheet1()
    styles.add(
        ParagraphStyle(
            'RKBody',
            parent=base['Normal'],
            fontName=font_name,
            fontSize=body_font_size,
            leading=max(13, int(body_font_size * 1.45)),
            spaceAfter=4,
        )
    )
    styles.add(
        ParagraphStyle(
            'RKTitle',
            parent=base['Title'],
            fontName=font_name,
            fontSize=int(title_font_size * 1.3),
            leading=max(20, int(title_font_size * 1.7)),
            spaceAfter=8,
        )
    )
    for level in range(1, _MAX_HEADING_LEVEL + 1):
        size = max(body_font_size + 1, int(title_font_size * (1.0 - 0.1 * (level - 1))))
        styles.add(
            ParagraphStyle(
                f'RKH{level}',
                parent=base[f'Heading{level}'],
                fontName=font_name,
                fontSize=size,
                leading=max(14, int(size * 1.3)),
                spaceBefore=6,
                spaceAfter=4,
            )
        )
    styles.add(
        ParagraphStyle(
            'RKCode',
            parent=base['Code'],
            fontName=mono_font_name,
            fontSize=max(7, body_font_size - 1),
            leading=max(10, int(body_font_size * 1.3)),
            backColor=colors.HexColor('#F4F4F4'),
            borderPadding=4,
            spaceBefore=4,
            spaceAfter=6,
        )
    )
    styles.add(
        ParagraphStyle(
            'RKCaption',
            parent=styles['RKBody'],
            fontName=font_name,
            fontSize=max(7, body_font_size - 1),
            textColor=colors.HexColor('#555555'),
        )
    )
    return styles


class PdfSink(BlockSink):
    """Builds a reportlab story from sink events and writes it on ``close()``."""

    def __init__(
        self,
        output_path: Path,
        *,
        font_name: str = 'Helvetica',
        mono_font_name: str = 'Courier',
        title_font_size: int = 15,
        body_font_size: int = 10,
        margin: int = 48,
    ) -> None:
        super().__init__()
        self.output_path = output_path
        self.margin = margin
        self.styles = _build_styles(
            font_name=font_name,
            mono_font_name=mono_font_name,
            title_font_size=title_font_size,
            body_font_size=body_font_size,
        )
        self.story: list = []
        self._anchors: set[str] = set()
        self._internal_targets: set[str] = set()

    def _escape(self, text: str) -> str:
        return escape(text)

    def _escape_verbatim(self, text: str) -> str:
        return escape(text)

    def _format_link(self, target: str, label: str) -> str:
        if target.startswith('#'):
            self._internal_targets.add(target[1:])
        return f'<a href={quoteattr(target)} color="blue">{label}</a>'

    def _emit_paragraph(self, content: str) -> None:
        text = content.strip()
        if text:
            self.story.append(Paragraph(text, self.styles['RKBody']))

    def _emit_verbatim(self, content: str) -> None:
        self.story.append(XPreformatted(content.rstrip('\n'), self.styles['RKCode']))

    def _emit_table(self, table: TableState) -> None:
        width = table.column_count()
        if width == 0:
            return

        body = self.styles['RKBody']
        data: list[list[Paragraph]] = []
        for row, is_header in zip(table.rows, table.header_rows):
            cells: list[Paragraph] = []
            for col in range(width):
                content = row[col] if col < len(row) else ''
                style = ParagraphStyle(
                    f'RKCell{col}',
                    parent=body,
                    alignment=_CELL_ALIGNMENT[column_justification(table.justification, col)],
                    spaceAfter=0,
                )
                cells.append(Paragraph(f'<b>{content}</b>' if is_header else content, style))
            data.append(cells)

        commands: list[tuple] = [
            ('VALIGN', (0, 0), (-1, -1), 'TOP'),
            ('LEFTPADDING', (0, 0), (-1, -1), 4),
            ('RIGHTPADDING', (0, 0), (-1, -1), 4),
        ]
        for index, is_header in enumerate(table.header_rows):
            if is_header:
                commands.append(('BACKGROUND', (0, index), (-1, index), colors.HexColor('#EEEEEE')))
        if table.grid:
            commands.append(('GRID', (0, 0), (-1, -1), 0.5, colors.grey))

        repeat_rows = 1 if table.header_rows and table.header_rows[0] else 0
        pdf_table = Table(data, repeatRows=repeat_rows, hAlign='LEFT')
        pdf_table.setStyle(TableStyle(commands))
        self.story.append(pdf_table)
        if table.caption:
            self.story.append(Paragraph(table.caption, self.styles['RKCaption']))
        self.story.append(Spacer(1, 2 * mm))

    def begin_document(self, title: str) -> None:
        self._title = title
        self.story.append(Paragraph(escape(title), self.styles['RKTitle']))

    def end_document(self) -> None:
        self._flush_loose_text()

    def open_section(self, level: int, title: str, anchor: str | None) -> None:
        self._flush_loose_text()
        style = self.styles[f'RKH{max(1, min(level, _MAX_HEADING_LEVEL))}']
        marker = ''
        if anchor:
            self._anchors.add(anchor)
            marker = f'<a name={quoteattr(anchor)}/>'
        self.story.append(Paragraph(marker + escape(title), style))

    def close_section(self, level: int) -> None:
        self._flush_loose_text()

    def flush(self) -> None:
        self._flush_loose_text()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._flush_loose_text()
        self.output_path.parent.mkdir(parents=True, exist_ok=True)

        story = list(self.story)
        if not story:
            story.append(Paragraph('Empty report', self.styles['RKBody']))

        # reportlab refuses to build with dangling internal destinations
        missing = sorted(self._internal_targets - self._anchors)
        if missing:
            logger.warning('PDF report %s links to undefined anchors: %s', self.output_path, ', '.join(missing))
            markers = ''.join(f'<a name={quoteattr(name)}/>' for name in missing)
            story.append(Paragraph(markers, self.styles['RKBody']))

        doc = SimpleDocTemplate(
            str(self.output_path),
            pagesize=A4,
            leftMargin=self.margin,
            rightMargin=self.margin,
            topMargin=self.margin,
            bottomMargin=self.margin,
            title=self._title or '',
        )
        doc.build(story)
        logger.info('Wrote PDF report %s (%s flowables)', self.output_path, len(story))

    def raw_text(self, text: str) -> None:
        # raw markup targets HTML-like outputs; a PDF story cannot carry it
        logger.debug('Dropped %s chars of raw markup from PDF output', len(text))
