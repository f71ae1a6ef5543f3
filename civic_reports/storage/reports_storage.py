#!/usr/bin/env python3
"""
Reports Storage

Keeps civic reports in the local storage medium, most recent first.
"""

import json
import logging
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .envelope import EnvelopeStore
from .medium import KeyValueStorage, StorageError
from .results import StoreResult

logger = logging.getLogger(__name__)

class ReportStatus(str, Enum):
    """Lifecycle status of a report."""
    NEW = "new"
    IN_PROGRESS = "in-progress"
    RESOLVED = "resolved"
    RESOLVED_BY_OFFICIAL = "resolved_by_official"

class ReportPriority(str, Enum):
    """Priority of a report."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"

@dataclass
class ReportStats:
    """Aggregate counts over the stored reports."""
    total: int = 0
    new: int = 0
    in_progress: int = 0
    resolved: int = 0
    resolved_by_official: int = 0
    with_images: int = 0
    by_priority: Dict[str, int] = field(
        default_factory=lambda: {priority.value: 0 for priority in ReportPriority}
    )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

_STATUS_FIELDS = {
    ReportStatus.NEW.value: 'new',
    ReportStatus.IN_PROGRESS.value: 'in_progress',
    ReportStatus.RESOLVED.value: 'resolved',
    ReportStatus.RESOLVED_BY_OFFICIAL.value: 'resolved_by_official',
}

def _enum_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value

class ReportsStorage:
    """Local storage manager for reports."""

    def __init__(self, medium: KeyValueStorage, storage_key: str = "local_reports",
                 export_dir: Union[str, Path] = "."):
        self.storage_key = storage_key
        self.export_dir = Path(export_dir)
        self._store = EnvelopeStore(medium, storage_key, "reports")

    def save_reports(self, reports: List[Dict[str, Any]]) -> StoreResult:
        """Persist the whole report collection."""
        return self._store.save_collection(reports)

    def load_reports(self) -> List[Dict[str, Any]]:
        """Load all reports; missing or corrupt data yields an empty list."""
        return self._store.load_collection()

    def add_report(self, report: Dict[str, Any]) -> StoreResult:
        """Add a report at the front of the collection."""
        reports = self.load_reports()
        reports.insert(0, report)
        return self.save_reports(reports)

    def update_report(self, report_id: Any, updated_data: Dict[str, Any]) -> StoreResult:
        """Shallow-merge ``updated_data`` into the report with ``report_id``."""
        return self._store.update_item(report_id, updated_data)

    def delete_report(self, report_id: Any) -> StoreResult:
        """Delete the report with ``report_id``."""
        return self._store.delete_item(report_id)

    def get_report_by_id(self, report_id: Any) -> Optional[Dict[str, Any]]:
        return self._store.find_item(report_id)

    def get_reports_by_status(self, status: Union[str, ReportStatus]) -> List[Dict[str, Any]]:
        status = _enum_value(status)
        return [report for report in self.load_reports() if report.get('status') == status]

    def get_reports_stats(self) -> Optional[ReportStats]:
        """Count reports by status, priority and image presence.

        Returns None when the stored collection cannot be read or counted.
        """
        try:
            reports = self._store.read_collection()
        except (StorageError, ValueError) as e:
            logger.error(f"Error getting reports statistics: {e}")
            return None

        stats = ReportStats(total=len(reports))
        try:
            for report in reports:
                status_field = _STATUS_FIELDS.get(report.get('status'))
                if status_field:
                    setattr(stats, status_field, getattr(stats, status_field) + 1)
                if report.get('hasImages'):
                    stats.with_images += 1
                priority = report.get('priority')
                if priority in stats.by_priority:
                    stats.by_priority[priority] += 1
        except (TypeError, ValueError) as e:
            logger.error(f"Error getting reports statistics: {e}")
            return None
        return stats

    def clear_reports(self) -> StoreResult:
        return self._store.clear()

    def get_reports_count(self) -> int:
        return len(self.load_reports())

    def export_reports(self, export_dir: Optional[Union[str, Path]] = None) -> Optional[Path]:
        """Write all reports to ``reports_backup_<date>.json`` and return its path."""
        target_dir = Path(export_dir) if export_dir is not None else self.export_dir
        file_path = target_dir / f"reports_backup_{datetime.now(timezone.utc).date().isoformat()}.json"
        reports = self.load_reports()
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
            with open(file_path, 'w', encoding='utf-8') as f:
                json.dump(reports, f, indent=2, ensure_ascii=False)
        except (OSError, TypeError) as e:
            logger.error(f"Error exporting reports to {file_path}: {e}")
            return None

        logger.info(f"Exported {len(reports)} reports to {file_path}")
        return file_path
