from __future__ import annotations

from datetime import datetime, timezone
from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def parse_timestamp(value: str | None) -> datetime | None:
    raw = str(value or '').strip()
    if not raw:
        return None
    if raw.isdigit():
        return datetime.fromtimestamp(int(raw), tz=timezone.utc)
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError as exc:
        raise ValueError(f'invalid output_timestamp: {raw}') from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore',
    )

    output_dir: Path = Field(
        default=Path('./target/reports'),
        validation_alias=AliasChoices('REPORT_OUTPUT_DIR', 'OUTPUT_DIR', 'output_dir'),
    )
    # None renders html; otherwise one of the registered sink formats
    output_format: str | None = Field(
        default=None,
        validation_alias=AliasChoices('REPORT_OUTPUT_FORMAT', 'OUTPUT_FORMAT', 'output_format'),
    )
    input_encoding: str | None = Field(
        default=None,
        validation_alias=AliasChoices('REPORT_INPUT_ENCODING', 'SOURCE_ENCODING', 'input_encoding'),
    )
    output_encoding: str | None = Field(
        default=None,
        validation_alias=AliasChoices('REPORT_OUTPUT_ENCODING', 'OUTPUT_ENCODING', 'output_encoding'),
    )
    locale: str = 'en'

    # ISO 8601 timestamp or seconds since the epoch
    output_timestamp: str | None = Field(
        default=None,
        validation_alias=AliasChoices('REPORT_OUTPUT_TIMESTAMP', 'SOURCE_DATE_EPOCH', 'output_timestamp'),
    )

    # Comma-separated report names expected later in the same build (e.g. 'xref,xref-test')
    scheduled_reports: str = ''

    record_runs: bool = True

    # PDF export
    pdf_font_name: str = 'Helvetica'
    pdf_mono_font_name: str = 'Courier'
    pdf_title_font_size: int = 15
    pdf_body_font_size: int = 10
    pdf_page_margin: int = 48

    @field_validator('output_timestamp')
    @classmethod
    def _check_output_timestamp(cls, value: str | None) -> str | None:
        parse_timestamp(value)
        return value

    def effective_input_encoding(self) -> str:
        return self.input_encoding or 'utf-8'

    def effective_output_encoding(self) -> str:
        return self.output_encoding or 'utf-8'

    def scheduled_report_names(self) -> list[str]:
        names: list[str] = []
        for item in self.scheduled_reports.split(','):
            normalized = item.strip()
            if not normalized:
                continue
            names.append(normalized)
        return names

    def publish_date(self) -> datetime | None:
        return parse_timestamp(self.output_timestamp)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
