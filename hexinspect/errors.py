"""Exception classes shared by the hexinspect application layers."""


class HexInspectError(Exception):
    """Base class for errors raised outside the pure decoder."""


class FileLoadError(HexInspectError):
    """A file could not be read into a byte buffer."""


class AnalysisError(HexInspectError):
    """An AI provider request failed or returned an unusable answer."""


class AnalysisCancelled(AnalysisError):
    """The analysis was superseded by a newer request for the same key."""
