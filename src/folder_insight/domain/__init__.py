from .errors import (
    ConfigurationError,
    FolderInsightError,
    ScanRootError,
)
from .models import (
    NO_EXTENSION,
    ExtensionTotal,
    FileRecord,
    ScanOutcome,
    ScanStats,
    SkipReason,
    TraversalPolicy,
    extension_of,
)

__all__ = [
    "ConfigurationError",
    "FolderInsightError",
    "ScanRootError",
    "NO_EXTENSION",
    "ExtensionTotal",
    "FileRecord",
    "ScanOutcome",
    "ScanStats",
    "SkipReason",
    "TraversalPolicy",
    "extension_of",
]
