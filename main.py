from __future__ import annotations

import argparse
import json
import logging
from dataclasses import asdict
from pathlib import Path

from pydantic import ValidationError

from reportkit.config import get_settings
from reportkit.document import DocumentReport
from reportkit.errors import ReportError
from reportkit.pattern import create_link_patterned_text, parse_link_pattern
from reportkit.types import ReportRunState


def _print_json(payload: dict) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))


def _run_snapshot(state: ReportRunState) -> dict:
    return {
        'run_id': str(state.id),
        'report': state.report_name,
        'status': state.status.value,
        'message': state.message,
        'error': state.error,
        'external': state.external,
        'locale': state.locale,
        'created_at': state.created_at.isoformat(),
        'updated_at': state.updated_at.isoformat(),
        'artifacts': state.artifacts.model_dump(mode='json'),
    }


def cmd_segments(args: argparse.Namespace) -> int:
    try:
        segments = parse_link_pattern(args.text)
    except ReportError as exc:
        _print_json({'status': 'error', 'message': str(exc)})
        return 2
    _print_json({'text': args.text, 'segments': [asdict(segment) for segment in segments]})
    return 0


def cmd_link_pattern(args: argparse.Namespace) -> int:
    print(create_link_patterned_text(args.text, args.href))
    return 0


def cmd_render(args: argparse.Namespace) -> int:
    try:
        settings = get_settings()
    except ValidationError as exc:
        _print_json({'status': 'error', 'message': 'Invalid settings', 'cause': str(exc)})
        return 2

    document_path = Path(args.document).expanduser().resolve()
    if not document_path.exists() or not document_path.is_file():
        _print_json({'status': 'error', 'message': f'Document not found: {document_path}'})
        return 2

    output_dir = Path(args.output_dir).expanduser() if args.output_dir else None
    try:
        report = DocumentReport.from_file(
            document_path,
            settings=settings,
            output_dir=output_dir,
            output_format=args.format,
            locale=args.locale,
        )
        state = report.execute()
    except ReportError as exc:
        cause = exc.__cause__
        _print_json(
            {
                'status': 'error',
                'message': str(exc),
                'cause': str(cause) if cause is not None else None,
            }
        )
        return 2

    _print_json(_run_snapshot(state))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='reportkit report rendering CLI')
    parser.add_argument('--log-level', default='WARNING', help='Logging level (DEBUG, INFO, WARNING, ...)')
    sub = parser.add_subparsers(dest='command', required=True)

    segments = sub.add_parser('segments', help='Parse a link pattern and print its segments')
    segments.add_argument('--text', required=True, help='Link patterned text, e.g. "see {docs, https://...}"')
    segments.set_defaults(func=cmd_segments)

    link_pattern = sub.add_parser('link-pattern', help='Build a {text, href} link pattern')
    link_pattern.add_argument('--text', required=True)
    link_pattern.add_argument('--href', required=True)
    link_pattern.set_defaults(func=cmd_link_pattern)

    render = sub.add_parser('render', help='Render a JSON document description')
    render.add_argument('--document', required=True, help='Path to the document JSON file')
    render.add_argument('--format', choices=['html', 'md', 'markdown', 'pdf'], required=False)
    render.add_argument('--output-dir', required=False, help='Report output directory override')
    render.add_argument('--locale', required=False)
    render.set_defaults(func=cmd_render)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
    return int(args.func(args))


if __name__ == '__main__':
    raise SystemExit(main())
