from elections.stores.interfaces import ConflictError, EventStore, StoreError, VoteStore

__all__ = ["ConflictError", "EventStore", "StoreError", "VoteStore"]
