from __future__ import annotations

from .errors import (
    ReportError,
    ReportGenerationError,
    UnbalancedGroupError,
    UnbalancedSectionError,
    UnknownOutputFormatError,
)
from .pattern import Segment, create_link_patterned_text, flatten_segments, parse_link_pattern, properties_to_string
from .renderer import ReportRenderer, SectionTracker, render_link_pattern, render_segments
from .report import Report
from .sink import EventSink, Justify, Sink

__version__ = '0.1.0'

__all__ = [
    'EventSink',
    'Justify',
    'Report',
    'ReportError',
    'ReportGenerationError',
    'ReportRenderer',
    'SectionTracker',
    'Segment',
    'Sink',
    'UnbalancedGroupError',
    'UnbalancedSectionError',
    'UnknownOutputFormatError',
    'create_link_patterned_text',
    'flatten_segments',
    'parse_link_pattern',
    'properties_to_string',
    'render_link_pattern',
    'render_segments',
]
