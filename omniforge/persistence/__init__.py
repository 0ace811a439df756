"""
Persistence Layer.
Finished production assets, in memory or in SQLite.
"""
from .assets_repo import (
    Asset,
    AssetDraft,
    BaseAssetRepository,
    InMemoryAssetRepository,
    SQLiteAssetRepository,
    get_asset_repository,
    reset_asset_repository,
)
from .database import get_connection, close_connection, transaction

__all__ = [
    "Asset",
    "AssetDraft",
    "BaseAssetRepository",
    "InMemoryAssetRepository",
    "SQLiteAssetRepository",
    "get_asset_repository",
    "reset_asset_repository",
    "get_connection",
    "close_connection",
    "transaction",
]
