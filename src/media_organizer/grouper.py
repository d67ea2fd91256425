"""
Grouper module - Live Photo pairing index

Live Photo halves are linked two ways:
1. Token: ExifTool ContentIdentifier shared by the HEIC and the MOV
2. Name key: same directory and same stem (photo.heic + photo.mov)

Both indexes keep one best date candidate per key. A candidate is only
replaced by a strictly more confident one (exact over approximate); on
equal confidence the first record in input order wins.

The index is filled by PairIndexBuilder and then frozen into a PairIndex,
which is only read while identities are resolved.
"""

import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from types import MappingProxyType

from .constants import is_photo_extension
from .dates import ResolvedRecord
from .hashing import md5_string


@dataclass(frozen=True)
class BestCandidate:
    """Most confident date seen for a group."""

    date: datetime
    approx: bool

    def is_more_confident_than(self, other: "BestCandidate") -> bool:
        return not self.approx and other.approx


class HashCell:
    """
    Compute-once slot for the content hash of a group's designated photo.

    Safe to share between threads; the hasher runs at most once.
    """

    def __init__(self, path: Path):
        self.path = path
        self._value: str | None = None
        self._lock = threading.Lock()

    @property
    def computed(self) -> bool:
        return self._value is not None

    def get(self, hasher: Callable[[Path], str]) -> str:
        if self._value is None:
            with self._lock:
                if self._value is None:
                    self._value = hasher(self.path)
        return self._value


@dataclass(frozen=True)
class TokenGroup:
    """Records sharing one ContentIdentifier."""

    token: str
    identity_hash: str
    candidate: BestCandidate | None = None


@dataclass(frozen=True)
class NameGroup:
    """Records sharing one name key, anchored on a dated photo."""

    key: str
    candidate: BestCandidate
    photo: HashCell


def _offer(current: BestCandidate | None, date: datetime, approx: bool) -> BestCandidate | None:
    """Return the new best candidate, or None to keep the current one."""
    offered = BestCandidate(date=date, approx=approx)
    if current is None or offered.is_more_confident_than(current):
        return offered
    return None


class PairIndexBuilder:
    """Single-pass builder for the token and name-key indexes."""

    def __init__(self):
        self._token_hashes: dict[str, str] = {}
        self._token_candidates: dict[str, BestCandidate] = {}
        self._name_candidates: dict[str, BestCandidate] = {}
        self._name_photos: dict[str, Path] = {}
        self._built = False

    def add(self, record: ResolvedRecord) -> None:
        """Feed one record; call in stable input order."""
        if self._built:
            raise RuntimeError("PairIndexBuilder already built")

        token = record.content_identifier
        if token is not None and token not in self._token_hashes:
            self._token_hashes[token] = md5_string(token)

        if record.date is None or not is_photo_extension(record.extension):
            return

        if token is not None:
            best = _offer(self._token_candidates.get(token), record.date, record.approx)
            if best is not None:
                self._token_candidates[token] = best

        key = record.name_key
        best = _offer(self._name_candidates.get(key), record.date, record.approx)
        if best is not None:
            self._name_candidates[key] = best
            self._name_photos[key] = record.source_path

    def add_all(self, records: Iterable[ResolvedRecord]) -> "PairIndexBuilder":
        for record in records:
            self.add(record)
        return self

    def build(self) -> "PairIndex":
        """Freeze the collected candidates into a read-only PairIndex."""
        self._built = True
        tokens = {
            token: TokenGroup(token=token, identity_hash=identity_hash, candidate=self._token_candidates.get(token))
            for token, identity_hash in self._token_hashes.items()
        }
        names = {
            key: NameGroup(key=key, candidate=candidate, photo=HashCell(self._name_photos[key]))
            for key, candidate in self._name_candidates.items()
        }
        return PairIndex(tokens, names)


class PairIndex:
    """Read-only lookup of token and name-key groups."""

    def __init__(self, tokens: dict[str, TokenGroup], names: dict[str, NameGroup]):
        self.tokens = MappingProxyType(tokens)
        self.names = MappingProxyType(names)

    def token_group(self, token: str | None) -> TokenGroup | None:
        if token is None:
            return None
        return self.tokens.get(token)

    def name_group(self, key: str) -> NameGroup | None:
        return self.names.get(key)


def build_pair_index(records: Iterable[ResolvedRecord]) -> PairIndex:
    """
    Build the pairing index over a complete batch.

    Args:
        records: All resolved records of the batch, in input order

    Returns:
        PairIndex ready for identity resolution
    """
    return PairIndexBuilder().add_all(records).build()
