from __future__ import annotations

import logging
import os
import traceback
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from .config import Settings, get_settings
from .errors import ReportError, ReportGenerationError
from .sink import Sink
from .sinks import SinkFactory, create_sink, normalize_output_format
from .storage import append_event, events_path, state_path, write_json_atomic
from .types import ReportRunState, RunStatus, utcnow


logger = logging.getLogger(__name__)

CATEGORY_PROJECT_REPORTS = 'Project Reports'
XREF_REPORT_NAME = 'xref'


class Report(ABC):
    """A report that renders either standalone or into a caller-supplied sink.

    Subclasses implement ``output_name``, ``get_name``, ``get_description``
    and ``execute_report``; ``execute()`` takes care of the output
    directory, the sink for the chosen format and the run record.
    """

    def __init__(
        self,
        *,
        settings: Settings | None = None,
        output_dir: Path | None = None,
        output_format: str | None = None,
        locale: str | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._output_dir = Path(output_dir) if output_dir is not None else None
        self.output_format = output_format
        self.locale = locale
        self._sink: Sink | None = None
        self._sink_factory: SinkFactory | None = None

    @property
    @abstractmethod
    def output_name(self) -> str:
        raise NotImplementedError

    @abstractmethod
    def get_name(self, locale: str | None = None) -> str:
        raise NotImplementedError

    @abstractmethod
    def get_description(self, locale: str | None = None) -> str:
        raise NotImplementedError

    @abstractmethod
    def execute_report(self, locale: str | None) -> None:
        raise NotImplementedError

    @property
    def category_name(self) -> str:
        return CATEGORY_PROJECT_REPORTS

    @property
    def sink(self) -> Sink | None:
        return self._sink

    def is_external_report(self) -> bool:
        return False

    def can_generate_report(self) -> bool:
        return True

    # Output resolution

    @property
    def report_output_directory(self) -> Path:
        if self._output_dir is None:
            self._output_dir = Path(self.settings.output_dir)
        return self._output_dir.resolve()

    @report_output_directory.setter
    def report_output_directory(self, value: Path) -> None:
        self._output_dir = Path(value)

    def get_locale(self) -> str:
        return self.locale or self.settings.locale

    def get_input_encoding(self) -> str:
        return self.settings.effective_input_encoding()

    def get_output_encoding(self) -> str:
        return self.settings.effective_output_encoding()

    def effective_output_format(self) -> str:
        return normalize_output_format(self.output_format or self.settings.output_format)

    # Rendering

    @property
    def sink_factory(self) -> SinkFactory | None:
        return self._sink_factory

    def create_sink_factory(self) -> SinkFactory:
        return SinkFactory(self.report_output_directory, self.effective_output_format(), self.settings)

    def generate(self, sink: Sink | None, locale: str | None = None, *, sink_factory: SinkFactory | None = None) -> None:
        self._sink = sink
        self._sink_factory = sink_factory
        self.execute_report(locale)
        self.close_report()

    def close_report(self) -> None:
        if self._sink is not None:
            self._sink.close()

    def execute(self) -> ReportRunState:
        locale = self.get_locale()
        name = self.get_name(locale)
        state = ReportRunState(
            report_name=name,
            output_name=self.output_name,
            external=self.is_external_report(),
            locale=locale,
        )
        state.artifacts.output_directory = str(self.report_output_directory)

        try:
            can_generate = self.can_generate_report()
        except ReportError as exc:
            raise ReportGenerationError('Failed to determine whether report can be generated') from exc

        if not can_generate:
            logger.info('Skipping %s report', name)
            self._transition(state, RunStatus.skipped, f'Skipped {name} report.')
            return state

        try:
            sink_factory = self.create_sink_factory()
            try:
                if self.is_external_report():
                    self._transition(state, RunStatus.rendering, f'Running external {name} report...')
                    self.generate(None, locale, sink_factory=sink_factory)
                else:
                    self._render_to_file(state, locale, sink_factory)
            finally:
                sink_factory.close()
                state.artifacts.pages = [str(path) for path in sink_factory.paths]
        except Exception as exc:
            detail = ''.join(traceback.format_exception_only(type(exc), exc)).strip()
            state.error = detail
            logger.error('%s report failed: %s', name, detail)
            self._transition(state, RunStatus.failed, f'{name} report failed.', error=detail)
            raise ReportGenerationError(f'An error has occurred in {name} report generation.') from exc

        self._transition(state, RunStatus.completed, f'{name} report completed.')
        return state

    def _render_to_file(self, state: ReportRunState, locale: str, sink_factory: SinkFactory) -> None:
        output_format = sink_factory.output_format
        sink, path = create_sink(output_format, self.report_output_directory, self.output_name, self.settings)
        state.artifacts.output_format = output_format
        state.artifacts.output_path = str(path)

        logger.info('Rendering %s report to %s markup: %s', state.report_name, output_format, path)
        self._transition(state, RunStatus.rendering, f'Rendering {output_format} output...')
        try:
            self.generate(sink, locale, sink_factory=sink_factory)
        finally:
            sink.close()

    def _transition(self, state: ReportRunState, status: RunStatus, message: str, **extra: Any) -> None:
        state.status = status
        state.message = message
        state.updated_at = utcnow()
        if not self.settings.record_runs:
            return
        output_dir = self.report_output_directory
        write_json_atomic(state_path(output_dir, self.output_name), state.model_dump(mode='json'))
        append_event(
            events_path(output_dir, self.output_name),
            status.value,
            run_id=str(state.id),
            message=message,
            **extra,
        )

    # Cross references

    def get_xref_location(self, location: Path | None, test: bool) -> Path:
        if location is not None:
            return Path(location)
        return self.report_output_directory / ('xref-test' if test else 'xref')

    def construct_xref_location(self, location: Path | None, test: bool) -> str | None:
        """Relative link to the (test) source xref, or ``None`` when none will exist."""
        xref_location = self.get_xref_location(location, test).resolve()
        relative_parent = os.path.relpath(xref_location.parent, self.report_output_directory)
        relative_path = Path(relative_parent or '.').as_posix() + '/' + xref_location.name

        if xref_location.exists():
            return relative_path
        if XREF_REPORT_NAME in self.settings.scheduled_report_names():
            return relative_path

        logger.warning('Unable to locate%s Source XRef to link to -- DISABLED', ' Test' if test else '')
        return None
