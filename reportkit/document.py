from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, ValidationError

from .config import Settings, get_settings
from .errors import ReportError
from .renderer import ReportRenderer
from .report import Report
from .sink import Justify, Sink


class ParagraphBlock(BaseModel):
    kind: Literal['paragraph'] = 'paragraph'
    text: str | None = None
    # parse `{label, target}` groups in the text
    links: bool = False


class LinkBlock(BaseModel):
    kind: Literal['link'] = 'link'
    href: str
    label: str | None = None


class VerbatimBlock(BaseModel):
    kind: Literal['verbatim'] = 'verbatim'
    text: str | None = None
    href: str | None = None


class TableBlock(BaseModel):
    kind: Literal['table'] = 'table'
    caption: str | None = None
    header: list[str | None] | None = None
    rows: list[list[str | None]] = Field(default_factory=list)
    justification: list[Justify] | None = None
    grid: bool = False


class SectionBlock(BaseModel):
    kind: Literal['section'] = 'section'
    title: str | None = None
    anchor: str | None = None
    blocks: list['Block'] = Field(default_factory=list)


Block = Annotated[
    Union[SectionBlock, ParagraphBlock, TableBlock, VerbatimBlock, LinkBlock],
    Field(discriminator='kind'),
]

SectionBlock.model_rebuild()


class DocumentSpec(BaseModel):
    title: str
    output_name: str
    description: str = ''
    blocks: list[Block] = Field(default_factory=list)


def load_document(path: Path, *, encoding: str = 'utf-8') -> DocumentSpec:
    try:
        payload = json.loads(Path(path).read_text(encoding=encoding))
        return DocumentSpec.model_validate(payload)
    except (json.JSONDecodeError, UnicodeDecodeError, ValidationError) as exc:
        raise ReportError(f'invalid document {path}: {exc}') from exc


class DocumentRenderer(ReportRenderer):
    def __init__(self, sink: Sink, document: DocumentSpec) -> None:
        super().__init__(sink)
        self.document = document

    @property
    def title(self) -> str | None:
        return self.document.title

    def render_body(self) -> None:
        for block in self.document.blocks:
            self._render_block(block)

    def _render_block(self, block: Block) -> None:
        if isinstance(block, SectionBlock):
            self.start_section(block.title, block.anchor)
            for child in block.blocks:
                self._render_block(child)
            self.end_section()
        elif isinstance(block, ParagraphBlock):
            if block.links:
                self.patterned_paragraph(block.text)
            else:
                self.paragraph(block.text)
        elif isinstance(block, TableBlock):
            self.start_table(block.justification, block.grid)
            if block.header is not None:
                self.table_header(block.header)
            for row in block.rows:
                self.table_row(row)
            if block.caption is not None:
                self.table_caption(block.caption)
            self.end_table()
        elif isinstance(block, VerbatimBlock):
            self.verbatim_link(block.text, block.href)
        elif isinstance(block, LinkBlock):
            self.sink.open_paragraph()
            self.link(block.href, block.label)
            self.sink.close_paragraph()


class DocumentReport(Report):
    """Renders a JSON document description as a report."""

    def __init__(self, document: DocumentSpec, *, settings: Settings | None = None, **kwargs) -> None:
        super().__init__(settings=settings, **kwargs)
        self.document = document

    @classmethod
    def from_file(cls, path: Path, *, settings: Settings | None = None, **kwargs) -> 'DocumentReport':
        settings = settings or get_settings()
        document = load_document(path, encoding=settings.effective_input_encoding())
        return cls(document, settings=settings, **kwargs)

    @property
    def output_name(self) -> str:
        return self.document.output_name

    def get_name(self, locale: str | None = None) -> str:
        return self.document.title

    def get_description(self, locale: str | None = None) -> str:
        return self.document.description

    def execute_report(self, locale: str | None) -> None:
        if self.sink is None:
            raise ReportError(f'{self.get_name(locale)} report needs a sink')
        DocumentRenderer(self.sink, self.document).render()
