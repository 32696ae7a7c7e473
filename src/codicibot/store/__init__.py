"""Code record store layer.

Records are keyed by the OpenMove code. Several codes may be attached to
the same vehicle; lookups by vehicle return all sufficiently confident ones.
"""

from codicibot.store.base import CodeStore, bounded
from codicibot.store.memory import InMemoryCodeStore
from codicibot.store.sqlite import SqliteCodeStore

__all__ = ["CodeStore", "InMemoryCodeStore", "SqliteCodeStore", "bounded"]
