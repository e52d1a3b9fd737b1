"""Link pattern mini-language.

A link pattern is plain text in which ``{label, target}`` groups become
hyperlinks::

    >>> parse_link_pattern('see {the docs, https://example.org/docs}')
    [Segment(label='see ', target=None), Segment(label='the docs', target='https://example.org/docs')]

Outside a group, a single quote starts a quoted span in which braces are
literal, and a doubled quote (``''``) emits one literal apostrophe.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from .errors import UnbalancedGroupError


logger = logging.getLogger(__name__)

PLACEHOLDER_MARKER = '${'

_QUOTE = "'"
_GROUP_OPEN = '{'
_GROUP_CLOSE = '}'
_TARGET_SEPARATOR = ','


@dataclass(frozen=True)
class Segment:
    label: str
    target: str | None = None

    @property
    def is_link(self) -> bool:
        return self.target is not None


def is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


def _placeholder_segments(text: str) -> list[Segment]:
    # ${...} belongs to another substitution syntax: keep it intact or show only its final operand
    last_comma = text.rfind(_TARGET_SEPARATOR)
    last_close = text.rfind(_GROUP_CLOSE)
    if last_comma != -1 and last_close != -1 and last_comma < last_close:
        return [Segment(text[last_comma + 1:last_close].strip())]
    return [Segment(text)]


def _group_segment(content: str) -> Segment:
    comma = content.rfind(_TARGET_SEPARATOR)
    if comma == -1:
        return Segment(content)
    label = content[:comma].strip()
    target = content[comma + 1:].strip()
    return Segment(label, target or None)


def parse_link_pattern(text: str) -> list[Segment]:
    """Split ``text`` into ordered label/target segments.

    Raises :class:`UnbalancedGroupError` when a ``{`` group is left open.
    An unmatched quote is tolerated and read as ordinary text.
    """
    if is_blank(text):
        return [Segment(text or '')]

    if PLACEHOLDER_MARKER in text:
        return _placeholder_segments(text)

    segments: list[Segment] = []
    in_quote = False
    depth = 0
    last_offset = 0
    length = len(text)

    index = 0
    while index < length:
        ch = text[index]
        if ch == _QUOTE and not in_quote and depth == 0:
            if index + 1 < length and text[index + 1] == _QUOTE:
                index += 1
                segments.append(Segment(text[last_offset:index]))
                last_offset = index + 1
            else:
                in_quote = True
        elif ch == _GROUP_OPEN and not in_quote:
            if depth == 0:
                if index != last_offset:
                    segments.append(Segment(text[last_offset:index]))
                last_offset = index + 1
            depth += 1
        elif ch == _GROUP_CLOSE and not in_quote:
            depth -= 1
            if depth < 0:
                raise UnbalancedGroupError('Unmatched braces in the pattern.')
            if depth == 0:
                segments.append(_group_segment(text[last_offset:index]))
                last_offset = index + 1
        elif ch == _QUOTE:
            in_quote = False
        index += 1

    if depth != 0:
        raise UnbalancedGroupError('Unmatched braces in the pattern.')

    remainder = text[last_offset:]
    if not is_blank(remainder):
        segments.append(Segment(remainder))

    if in_quote:
        logger.debug('Unmatched quote in link pattern, treated as text: %r', text)

    return segments


def flatten_segments(segments: Iterable[Segment]) -> str:
    return ''.join(segment.label for segment in segments)


def create_link_patterned_text(text: str | None, href: str | None) -> str | None:
    """Build a ``{text, href}`` pattern; ``text`` is returned as-is if either part is missing."""
    if text is None or href is None:
        return text
    return '{' + text + ', ' + href + '}'


def properties_to_string(props: Mapping[Any, Any] | None) -> str:
    if not props:
        return ''
    return ', '.join(f'{key}={value}' for key, value in props.items())
