from .scan_service import ScanService
from .report_service import ReportService, format_bytes, percent
from .tree_service import TreeService, TreeLine


__all__ = [
    'ScanService',
    'ReportService',
    'format_bytes',
    'percent',
    'TreeService',
    'TreeLine',
]
