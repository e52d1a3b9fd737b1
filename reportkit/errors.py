from __future__ import annotations


class ReportError(Exception):
    """Base class for report rendering failures."""


class UnbalancedGroupError(ReportError, ValueError):
    """A link pattern opened a `{` group that was never closed."""


class UnbalancedSectionError(ReportError, RuntimeError):
    """A section was closed without a matching open."""


class UnknownOutputFormatError(ReportError, ValueError):
    pass


class ReportGenerationError(ReportError):
    pass
