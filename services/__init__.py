"""
Services package for the RCB Marketplace.
Contains the storage contract, its adapters, and the AI-backed domain services.
"""

from services.storage import Storage, StorageError, create_storage

__all__ = [
    'Storage',
    'StorageError',
    'create_storage',
]
