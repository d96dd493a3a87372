"""Token storage for Parcel Notify."""

from parcel_notify.store.sweeper import TokenSweeper
from parcel_notify.store.token_store import TokenStore

__all__ = ["TokenStore", "TokenSweeper"]
