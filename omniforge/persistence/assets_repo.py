"""
Asset Repository.
Stores finished production assets, one per successful generation task.
Supports both in-memory and SQLite backends.
"""
import json
import uuid
import logging
import sqlite3
from abc import ABC, abstractmethod
from datetime import datetime
from threading import Lock
from dataclasses import dataclass, field
from typing import Optional, Dict, List, Any

logger = logging.getLogger(__name__)


@dataclass
class AssetDraft:
    """Asset content before it is assigned an id."""
    run_id: str
    type: str
    title: str
    input_prompt: str
    output_data: Dict[str, Any]
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Asset:
    """Persisted asset."""
    id: str
    run_id: str
    type: str
    title: str
    input_prompt: str
    output_data: Dict[str, Any]
    metadata: Dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=datetime.utcnow)

    @classmethod
    def from_draft(cls, draft: AssetDraft) -> "Asset":
        return cls(
            id=f"asset-{uuid.uuid4().hex[:12]}",
            run_id=draft.run_id,
            type=draft.type,
            title=draft.title,
            input_prompt=draft.input_prompt,
            output_data=draft.output_data,
            metadata=draft.metadata,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "run_id": self.run_id,
            "type": self.type,
            "title": self.title,
            "input_prompt": self.input_prompt,
            "output_data": self.output_data,
            "metadata": self.metadata,
            "created_at": self.created_at.isoformat(),
        }


class BaseAssetRepository(ABC):
    """Abstract base class for asset repositories."""

    @abstractmethod
    def create_asset(self, draft: AssetDraft) -> Asset:
        """Persist a draft. Raises PersistenceError on failure."""
        pass

    @abstractmethod
    def get_asset(self, asset_id: str) -> Optional[Asset]:
        """Get asset by id."""
        pass

    @abstractmethod
    def list_run_assets(self, run_id: str) -> List[Asset]:
        """All assets of a run, oldest first."""
        pass


class InMemoryAssetRepository(BaseAssetRepository):
    """
    In-memory asset repository.
    Thread-safe, suitable for development/testing.
    """

    def __init__(self):
        self._assets: Dict[str, Asset] = {}
        self._run_assets: Dict[str, List[str]] = {}
        self._lock = Lock()
        logger.info("AssetRepository initialized (in-memory)")

    def create_asset(self, draft: AssetDraft) -> Asset:
        asset = Asset.from_draft(draft)
        with self._lock:
            self._assets[asset.id] = asset
            self._run_assets.setdefault(asset.run_id, []).append(asset.id)

        logger.info(f"[ASSETS] Stored {asset.type} asset {asset.id} for run {asset.run_id}")
        return asset

    def get_asset(self, asset_id: str) -> Optional[Asset]:
        with self._lock:
            return self._assets.get(asset_id)

    def list_run_assets(self, run_id: str) -> List[Asset]:
        with self._lock:
            asset_ids = self._run_assets.get(run_id, [])
            return [self._assets[aid] for aid in asset_ids if aid in self._assets]

    def clear(self) -> None:
        """Clear all records (for testing)."""
        with self._lock:
            self._assets.clear()
            self._run_assets.clear()


class SQLiteAssetRepository(BaseAssetRepository):
    """SQLite-based asset repository. JSON columns for output data and metadata."""

    def __init__(self, conn: Optional[sqlite3.Connection] = None):
        if conn is None:
            from .database import get_connection
            conn = get_connection()
        self._conn = conn
        logger.info("AssetRepository initialized (SQLite)")

    def create_asset(self, draft: AssetDraft) -> Asset:
        from omniforge.orchestration.exceptions import PersistenceError
        from .database import transaction

        asset = Asset.from_draft(draft)
        try:
            with transaction(self._conn) as conn:
                conn.execute(
                    """
                    INSERT INTO assets
                        (id, run_id, type, title, input_prompt, output_data, metadata, created_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        asset.id,
                        asset.run_id,
                        asset.type,
                        asset.title,
                        asset.input_prompt,
                        json.dumps(asset.output_data, default=str),
                        json.dumps(asset.metadata, default=str),
                        asset.created_at.isoformat(),
                    ),
                )
        except (sqlite3.Error, TypeError, ValueError) as e:
            raise PersistenceError(draft.type, f"Failed to store asset: {e}") from e

        logger.info(f"[ASSETS] Stored {asset.type} asset {asset.id} for run {asset.run_id}")
        return asset

    def get_asset(self, asset_id: str) -> Optional[Asset]:
        row = self._conn.execute(
            "SELECT * FROM assets WHERE id = ?",
            (asset_id,),
        ).fetchone()
        return self._row_to_asset(row) if row else None

    def list_run_assets(self, run_id: str) -> List[Asset]:
        rows = self._conn.execute(
            "SELECT * FROM assets WHERE run_id = ? ORDER BY created_at, rowid",
            (run_id,),
        ).fetchall()
        return [self._row_to_asset(row) for row in rows]

    def _row_to_asset(self, row: sqlite3.Row) -> Asset:
        return Asset(
            id=row["id"],
            run_id=row["run_id"],
            type=row["type"],
            title=row["title"],
            input_prompt=row["input_prompt"],
            output_data=json.loads(row["output_data"]),
            metadata=json.loads(row["metadata"]) if row["metadata"] else {},
            created_at=datetime.fromisoformat(row["created_at"]),
        )


_repository: Optional[BaseAssetRepository] = None


def get_asset_repository() -> BaseAssetRepository:
    """
    Get or create asset repository singleton.
    Backend selected via STORAGE_BACKEND environment variable.
    """
    global _repository

    if _repository is None:
        from omniforge.config import config

        if config.storage_backend == "sqlite":
            _repository = SQLiteAssetRepository()
        else:
            _repository = InMemoryAssetRepository()

    return _repository


def reset_asset_repository() -> None:
    """Reset asset repository singleton (for testing)."""
    global _repository
    _repository = None
