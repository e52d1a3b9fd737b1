"""Tests for reportkit.document: declarative JSON documents."""
from __future__ import annotations

import json

import pytest

from reportkit.config import Settings
from reportkit.document import (
    DocumentRenderer,
    DocumentReport,
    DocumentSpec,
    ParagraphBlock,
    SectionBlock,
    TableBlock,
    load_document,
)
from reportkit.errors import ReportError
from reportkit.sink import EventSink, Justify
from reportkit.types import RunStatus


DOCUMENT = {
    'title': 'Dependencies',
    'output_name': 'dependencies',
    'description': 'Project dependencies',
    'blocks': [
        {
            'kind': 'section',
            'title': 'Compile',
            'blocks': [
                {'kind': 'paragraph', 'text': 'Direct {dependencies, #compile}.', 'links': True},
                {
                    'kind': 'table',
                    'header': ['Artifact', 'License'],
                    'rows': [['commons-io', '{Apache-2.0, https://www.apache.org/licenses/LICENSE-2.0}']],
                    'justification': ['left', 'center'],
                    'grid': True,
                },
                {
                    'kind': 'section',
                    'title': 'Notes',
                    'anchor': 'notes',
                    'blocks': [{'kind': 'verbatim', 'text': 'mvn dependency:tree'}],
                },
            ],
        },
        {'kind': 'link', 'href': 'https://example.org', 'label': 'Home'},
    ],
}


@pytest.fixture
def document_file(tmp_path):
    path = tmp_path / 'document.json'
    path.write_text(json.dumps(DOCUMENT), encoding='utf-8')
    return path


class TestModel:
    def test_validate_nested_blocks(self) -> None:
        spec = DocumentSpec.model_validate(DOCUMENT)
        section = spec.blocks[0]
        assert isinstance(section, SectionBlock)
        assert isinstance(section.blocks[0], ParagraphBlock)
        assert isinstance(section.blocks[1], TableBlock)
        assert section.blocks[1].justification == [Justify.left, Justify.center]
        assert isinstance(section.blocks[2], SectionBlock)

    def test_load_document(self, document_file) -> None:
        assert load_document(document_file).title == 'Dependencies'

    def test_invalid_json(self, tmp_path) -> None:
        path = tmp_path / 'bad.json'
        path.write_text('{not json', encoding='utf-8')
        with pytest.raises(ReportError):
            load_document(path)

    def test_unknown_block_kind(self, tmp_path) -> None:
        path = tmp_path / 'bad.json'
        path.write_text(json.dumps({'title': 'T', 'output_name': 'o', 'blocks': [{'kind': 'image'}]}), encoding='utf-8')
        with pytest.raises(ReportError, match='invalid document'):
            load_document(path)


class TestDocumentRenderer:
    def test_event_stream(self) -> None:
        sink = EventSink()
        DocumentRenderer(sink, DocumentSpec.model_validate(DOCUMENT)).render()
        events = sink.events

        assert events[0] == ('begin_document', 'Dependencies')
        assert ('open_section', 1, 'Compile', 'Compile') in events
        assert ('open_section', 2, 'Notes', 'notes') in events
        assert ('open_link', '#compile') in events
        assert ('open_table', (Justify.left, Justify.center), True) in events
        assert ('open_link', 'https://www.apache.org/licenses/LICENSE-2.0') in events
        assert ('text', 'mvn dependency:tree') in events
        assert events.count(('close_section', 2)) == 1
        assert events.count(('close_section', 1)) == 1
        assert events[-3:] == [('end_document',), ('flush',), ('close',)]

    def test_link_block(self) -> None:
        sink = EventSink()
        DocumentRenderer(sink, DocumentSpec.model_validate(DOCUMENT)).render()
        index = sink.events.index(('open_link', 'https://example.org'))
        assert sink.events[index - 1] == ('open_paragraph',)
        assert sink.events[index + 1] == ('text', 'Home')

    def test_unbalanced_pattern_in_paragraph(self) -> None:
        spec = DocumentSpec(title='T', output_name='t', blocks=[ParagraphBlock(text='{oops', links=True)])
        with pytest.raises(ReportError):
            DocumentRenderer(EventSink(), spec).render()


class TestDocumentReport:
    def test_from_file_and_execute(self, tmp_path, document_file) -> None:
        settings = Settings(output_dir=tmp_path / 'site')
        report = DocumentReport.from_file(document_file, settings=settings)

        assert report.output_name == 'dependencies'
        assert report.get_description() == 'Project dependencies'

        state = report.execute()
        assert state.status == RunStatus.completed
        html_text = (tmp_path / 'site' / 'dependencies.html').read_text(encoding='utf-8')
        assert '<a href="#compile">dependencies</a>' in html_text
        assert '<pre>mvn dependency:tree</pre>' in html_text

    def test_pdf_output(self, tmp_path, document_file) -> None:
        settings = Settings(output_dir=tmp_path)
        DocumentReport.from_file(document_file, settings=settings, output_format='pdf').execute()
        assert (tmp_path / 'dependencies.pdf').read_bytes().startswith(b'%PDF')

    def test_execute_report_needs_sink(self, document_file) -> None:
        report = DocumentReport.from_file(document_file, settings=Settings())
        with pytest.raises(ReportError):
            report.generate(None)
