from __future__ import annotations

from pathlib import Path
from typing import Callable

from ..config import Settings
from ..errors import UnknownOutputFormatError
from ..sink import Sink
from .html import HtmlSink
from .markdown import MarkdownSink
from .pdf import PdfSink

DEFAULT_OUTPUT_FORMAT = 'html'


def _html_sink(path: Path, settings: Settings) -> Sink:
    return HtmlSink(path, encoding=settings.effective_output_encoding(), publish_date=settings.publish_date())


def _markdown_sink(path: Path, settings: Settings) -> Sink:
    return MarkdownSink(path, encoding=settings.effective_output_encoding())


def _pdf_sink(path: Path, settings: Settings) -> Sink:
    return PdfSink(
        path,
        font_name=settings.pdf_font_name,
        mono_font_name=settings.pdf_mono_font_name,
        title_font_size=settings.pdf_title_font_size,
        body_font_size=settings.pdf_body_font_size,
        margin=settings.pdf_page_margin,
    )


# format -> (file extension, factory)
SINK_FACTORIES: dict[str, tuple[str, Callable[[Path, Settings], Sink]]] = {
    'html': ('html', _html_sink),
    'md': ('md', _markdown_sink),
    'markdown': ('md', _markdown_sink),
    'pdf': ('pdf', _pdf_sink),
}


def normalize_output_format(output_format: str | None) -> str:
    token = str(output_format or DEFAULT_OUTPUT_FORMAT).strip().lower()
    if token not in SINK_FACTORIES:
        supported = ', '.join(sorted(SINK_FACTORIES))
        raise UnknownOutputFormatError(f'Cannot find a sink for output format: {output_format} (supported: {supported})')
    return token


def output_file(output_dir: Path, output_name: str, output_format: str | None) -> Path:
    extension, _ = SINK_FACTORIES[normalize_output_format(output_format)]
    return output_dir / f'{output_name}.{extension}'


def create_sink(
    output_format: str | None,
    output_dir: Path,
    output_name: str,
    settings: Settings,
) -> tuple[Sink, Path]:
    token = normalize_output_format(output_format)
    _, factory = SINK_FACTORIES[token]
    path = output_file(output_dir, output_name, token)
    path.parent.mkdir(parents=True, exist_ok=True)
    return factory(path, settings), path


class SinkFactory:
    """Opens extra output pages beside a report's main output.

    Every page shares the output directory, format and settings of the
    report that owns the factory. Sinks opened here are closed by ``close()``.
    """

    def __init__(self, output_dir: Path, output_format: str | None, settings: Settings) -> None:
        self.output_dir = output_dir
        self.output_format = normalize_output_format(output_format)
        self.settings = settings
        self._opened: list[tuple[Sink, Path]] = []

    def create_sink(self, output_name: str) -> Sink:
        sink, path = create_sink(self.output_format, self.output_dir, output_name, self.settings)
        self._opened.append((sink, path))
        return sink

    @property
    def paths(self) -> list[Path]:
        return [path for _, path in self._opened]

    def close(self) -> None:
        for sink, _ in self._opened:
            sink.close()


__all__ = [
    'DEFAULT_OUTPUT_FORMAT',
    'HtmlSink',
    'MarkdownSink',
    'PdfSink',
    'SINK_FACTORIES',
    'SinkFactory',
    'create_sink',
    'normalize_output_format',
    'output_file',
]
