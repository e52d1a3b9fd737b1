"""Tests for reportkit.report: standalone execution, run records and xref helpers."""
from __future__ import annotations

import json
import logging

import pytest

from reportkit.config import Settings
from reportkit.errors import ReportError, ReportGenerationError, UnbalancedSectionError, UnknownOutputFormatError
from reportkit.renderer import ReportRenderer
from reportkit.report import Report
from reportkit.sink import EventSink
from reportkit.storage import events_path, state_path
from reportkit.types import RunStatus


class _BodyRenderer(ReportRenderer):
    def __init__(self, sink, body):
        super().__init__(sink)
        self._body = body

    @property
    def title(self):
        return 'Simple'

    def render_body(self) -> None:
        self._body(self)


def _default_body(renderer: ReportRenderer) -> None:
    renderer.start_section('Summary')
    renderer.patterned_paragraph('Built with {reportkit, https://example.org/reportkit}.')
    renderer.end_section()


class SimpleReport(Report):
    def __init__(self, *, body=_default_body, can_generate=True, **kwargs):
        super().__init__(**kwargs)
        self._body = body
        self._can_generate = can_generate

    @property
    def output_name(self) -> str:
        return 'simple'

    def get_name(self, locale=None) -> str:
        return 'Simple Report'

    def get_description(self, locale=None) -> str:
        return 'A simple report.'

    def can_generate_report(self) -> bool:
        return self._can_generate

    def execute_report(self, locale) -> None:
        _BodyRenderer(self.sink, self._body).render()


class ExternalReport(Report):
    @property
    def output_name(self) -> str:
        return 'external/report'

    def get_name(self, locale=None) -> str:
        return 'External Report'

    def get_description(self, locale=None) -> str:
        return 'Writes its own pages.'

    def is_external_report(self) -> bool:
        return True

    def execute_report(self, locale) -> None:
        assert self.sink is None
        _BodyRenderer(self.sink_factory.create_sink('external/report'), _default_body).render()


class MultiPageReport(SimpleReport):
    def execute_report(self, locale) -> None:
        super().execute_report(locale)
        details = self.sink_factory.create_sink('simple-details')
        _BodyRenderer(details, lambda renderer: renderer.paragraph('Second page.')).render()


def _read_state(output_dir, output_name) -> dict:
    return json.loads(state_path(output_dir, output_name).read_text(encoding='utf-8'))


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(output_dir=tmp_path, output_format='md')


class TestExecute:
    def test_renders_to_output_file(self, tmp_path, settings) -> None:
        state = SimpleReport(settings=settings).execute()

        output = tmp_path / 'simple.md'
        assert state.status == RunStatus.completed
        assert state.artifacts.output_format == 'md'
        assert state.artifacts.output_path == str(tmp_path.resolve() / 'simple.md')
        text = output.read_text(encoding='utf-8')
        assert '# Summary' in text
        assert '[reportkit](https://example.org/reportkit)' in text

    def test_run_record(self, tmp_path, settings) -> None:
        state = SimpleReport(settings=settings).execute()

        out_dir = tmp_path.resolve()
        saved = _read_state(out_dir, 'simple')
        assert saved['status'] == 'completed'
        assert saved['id'] == str(state.id)
        rows = [json.loads(line) for line in events_path(out_dir, 'simple').read_text(encoding='utf-8').splitlines()]
        assert [row['event'] for row in rows] == ['rendering', 'completed']

    def test_record_runs_disabled(self, tmp_path) -> None:
        settings = Settings(output_dir=tmp_path, output_format='html', record_runs=False)
        SimpleReport(settings=settings).execute()
        assert (tmp_path / 'simple.html').exists()
        assert not (tmp_path / '.reportkit').exists()

    def test_format_argument_overrides_settings(self, tmp_path, settings) -> None:
        SimpleReport(settings=settings, output_format='html').execute()
        assert (tmp_path / 'simple.html').exists()
        assert not (tmp_path / 'simple.md').exists()

    def test_output_dir_argument(self, tmp_path, settings) -> None:
        other = tmp_path / 'elsewhere'
        SimpleReport(settings=settings, output_dir=other).execute()
        assert (other / 'simple.md').exists()

    def test_skipped_report(self, tmp_path, settings, caplog) -> None:
        with caplog.at_level(logging.INFO, logger='reportkit.report'):
            state = SimpleReport(settings=settings, can_generate=False).execute()
        assert state.status == RunStatus.skipped
        assert not (tmp_path / 'simple.md').exists()
        assert 'Skipping Simple Report report' in caplog.text

    def test_external_report(self, tmp_path, settings) -> None:
        state = ExternalReport(settings=settings).execute()
        page = tmp_path.resolve() / 'external' / 'report.md'
        assert state.status == RunStatus.completed
        assert state.external
        assert state.artifacts.output_path is None
        assert state.artifacts.pages == [str(page)]
        assert '# Summary' in page.read_text(encoding='utf-8')
        assert _read_state(tmp_path.resolve(), 'external/report')['status'] == 'completed'

    def test_extra_page_through_sink_factory(self, tmp_path, settings) -> None:
        state = MultiPageReport(settings=settings).execute()
        details = tmp_path.resolve() / 'simple-details.md'
        assert state.artifacts.output_path == str(tmp_path.resolve() / 'simple.md')
        assert state.artifacts.pages == [str(details)]
        assert 'Second page.' in details.read_text(encoding='utf-8')
        assert _read_state(tmp_path.resolve(), 'simple')['artifacts']['pages'] == [str(details)]

    def test_failure_is_recorded_and_wrapped(self, tmp_path, settings) -> None:
        def body(renderer):
            renderer.end_section()

        with pytest.raises(ReportGenerationError) as excinfo:
            SimpleReport(settings=settings, body=body).execute()

        assert isinstance(excinfo.value.__cause__, UnbalancedSectionError)
        assert 'Simple Report' in str(excinfo.value)
        saved = _read_state(tmp_path.resolve(), 'simple')
        assert saved['status'] == 'failed'
        assert 'Too many closing sections' in saved['error']

    def test_unexpected_error_is_recorded_and_wrapped(self, tmp_path, settings) -> None:
        def body(renderer):
            renderer.paragraph({}['missing'])

        with pytest.raises(ReportGenerationError) as excinfo:
            SimpleReport(settings=settings, body=body).execute()

        assert isinstance(excinfo.value.__cause__, KeyError)
        saved = _read_state(tmp_path.resolve(), 'simple')
        assert saved['status'] == 'failed'
        assert saved['error'].startswith('KeyError')
        rows = [json.loads(line) for line in events_path(tmp_path.resolve(), 'simple').read_text(encoding='utf-8').splitlines()]
        assert [row['event'] for row in rows] == ['rendering', 'failed']

    def test_unknown_format(self, tmp_path) -> None:
        settings = Settings(output_dir=tmp_path, output_format='docx')
        with pytest.raises(ReportGenerationError) as excinfo:
            SimpleReport(settings=settings).execute()
        assert isinstance(excinfo.value.__cause__, UnknownOutputFormatError)

    def test_can_generate_failure(self, settings) -> None:
        class Broken(SimpleReport):
            def can_generate_report(self) -> bool:
                raise ReportError('no project')

        with pytest.raises(ReportGenerationError, match='Failed to determine'):
            Broken(settings=settings).execute()


class TestGenerate:
    def test_generate_into_caller_sink(self, settings) -> None:
        sink = EventSink()
        SimpleReport(settings=settings).generate(sink, 'fr')
        assert sink.closed
        assert sink.events[0] == ('begin_document', 'Simple')
        assert ('open_link', 'https://example.org/reportkit') in sink.events


class TestResolution:
    def test_defaults(self, settings) -> None:
        report = SimpleReport(settings=settings)
        assert report.get_locale() == 'en'
        assert report.get_input_encoding() == 'utf-8'
        assert report.get_output_encoding() == 'utf-8'
        assert report.category_name == 'Project Reports'

    def test_locale_argument(self, settings) -> None:
        assert SimpleReport(settings=settings, locale='de').get_locale() == 'de'

    def test_encodings_from_settings(self, tmp_path) -> None:
        settings = Settings(output_dir=tmp_path, input_encoding='latin-1', output_encoding='utf-16')
        report = SimpleReport(settings=settings)
        assert report.get_input_encoding() == 'latin-1'
        assert report.get_output_encoding() == 'utf-16'

    def test_set_output_directory(self, tmp_path, settings) -> None:
        report = SimpleReport(settings=settings)
        report.report_output_directory = tmp_path / 'moved'
        assert report.report_output_directory == (tmp_path / 'moved').resolve()


class TestXref:
    def test_explicit_location(self, tmp_path, settings) -> None:
        location = tmp_path / 'custom-xref'
        assert SimpleReport(settings=settings).get_xref_location(location, False) == location

    def test_default_locations(self, tmp_path, settings) -> None:
        report = SimpleReport(settings=settings)
        assert report.get_xref_location(None, False).name == 'xref'
        assert report.get_xref_location(None, True).name == 'xref-test'

    def test_existing_xref(self, tmp_path, settings) -> None:
        (tmp_path / 'xref').mkdir()
        assert SimpleReport(settings=settings).construct_xref_location(None, False) == './xref'

    def test_scheduled_xref(self, tmp_path) -> None:
        settings = Settings(output_dir=tmp_path, scheduled_reports='javadoc, xref')
        assert SimpleReport(settings=settings).construct_xref_location(None, True) == './xref-test'

    def test_missing_xref(self, settings, caplog) -> None:
        with caplog.at_level(logging.WARNING, logger='reportkit.report'):
            assert SimpleReport(settings=settings).construct_xref_location(None, True) is None
        assert 'Unable to locate Test Source XRef to link to -- DISABLED' in caplog.text
