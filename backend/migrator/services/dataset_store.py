"""
Dataset Store

In-memory holder for parsed datasets and their profiles. Storing a dataset
makes it the current one; re-storing an id replaces the previous dataset and
its profile. Nothing is written to disk.
Thread-safe for concurrent requests.
"""

import logging
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..core.exceptions import DatasetNotFoundError
from .profiler import DatasetProfile, build_type_breakdown

logger = logging.getLogger("migrator.dataset_store")


@dataclass
class StoredDataset:
    dataset_id: str
    file_name: str
    file_type: str
    records: List[Dict[str, Any]]
    profile: DatasetProfile
    warnings: List[str] = field(default_factory=list)
    created_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def summary(self) -> Dict[str, Any]:
        return {
            "dataset_id": self.dataset_id,
            "file_name": self.file_name,
            "file_type": self.file_type,
            "row_count": self.profile.row_count,
            "column_count": self.profile.column_count,
            "has_gis_data": self.profile.has_gis_data,
            "type_breakdown": build_type_breakdown(self.profile),
            "warnings": list(self.warnings),
            "created_at": self.created_at,
        }


class DatasetStore:
    """
    Process-local dataset registry.

    The most recently stored dataset is the "current" one, mirroring the
    single active upload of the workbench.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._datasets: Dict[str, StoredDataset] = {}
        self._current_id: Optional[str] = None

    def put(
        self,
        records: List[Dict[str, Any]],
        profile: DatasetProfile,
        file_name: str,
        file_type: str,
        dataset_id: Optional[str] = None,
        warnings: Optional[List[str]] = None,
    ) -> StoredDataset:
        """Store a dataset and make it current."""
        with self._lock:
            dataset_id = dataset_id or str(uuid.uuid4())
            if dataset_id in self._datasets:
                logger.info("Replacing dataset %s", dataset_id)
            dataset = StoredDataset(
                dataset_id=dataset_id,
                file_name=file_name,
                file_type=file_type,
                records=records,
                profile=profile,
                warnings=list(warnings or []),
            )
            self._datasets[dataset_id] = dataset
            self._current_id = dataset_id
            logger.info("Stored dataset %s (%s, %d rows)", dataset_id, file_name, profile.row_count)
            return dataset

    def get(self, dataset_id: str) -> StoredDataset:
        """Get a dataset by ID."""
        with self._lock:
            dataset = self._datasets.get(dataset_id)
            if dataset is None:
                raise DatasetNotFoundError(dataset_id)
            return dataset

    def find(self, dataset_id: str) -> Optional[StoredDataset]:
        with self._lock:
            return self._datasets.get(dataset_id)

    def current(self) -> Optional[StoredDataset]:
        with self._lock:
            if self._current_id is None:
                return None
            return self._datasets.get(self._current_id)

    def list_datasets(self) -> List[StoredDataset]:
        with self._lock:
            return list(self._datasets.values())

    def delete(self, dataset_id: str) -> bool:
        """Remove a dataset. Returns False when it does not exist."""
        with self._lock:
            if dataset_id not in self._datasets:
                return False
            del self._datasets[dataset_id]
            if self._current_id == dataset_id:
                self._current_id = None
            logger.info("Deleted dataset %s", dataset_id)
            return True

    def reset(self) -> None:
        with self._lock:
            self._datasets.clear()
            self._current_id = None


# Global instance
dataset_store = DatasetStore()
