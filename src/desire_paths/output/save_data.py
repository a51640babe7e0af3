"""
Save-game persistence for Desire Paths.

The wear map is stored as a single opaque blob under one key of the
world save. The blob is UTF-8 JSON so saves stay inspectable; float
timestamps survive the round trip exactly.
"""

import json
from typing import Dict, List, Optional

from ..core.state import BlockPos, WearRecord, WearStore


FORMAT_VERSION = 1


class SaveDataError(Exception):
    """Raised when a persisted wear map cannot be decoded."""

    def __init__(self, message: str, key: Optional[str] = None):
        self.message = message
        self.key = key
        super().__init__(f"[{key}] {message}" if key else message)


def serialize_wear_map(records: Dict[BlockPos, WearRecord]) -> bytes:
    """
    Encode a wear map.

    Args:
        records: Mapping from cell to record, usually ``store.snapshot()``

    Returns:
        Blob suitable for ``SaveGame.store_data``
    """
    entries = [
        {
            'pos': pos.to_list(),
            'wear_level': record.wear_level,
            'last_update_hours': record.last_update_hours,
            'original_block_code': record.original_block_code,
        }
        for pos, record in records.items()
    ]
    payload = {'version': FORMAT_VERSION, 'entries': entries}
    return json.dumps(payload, separators=(',', ':')).encode('utf-8')


def deserialize_wear_map(blob: bytes) -> Dict[BlockPos, WearRecord]:
    """
    Decode a blob written by ``serialize_wear_map``.

    Raises:
        SaveDataError: If the blob is not a valid wear map
    """
    try:
        payload = json.loads(blob.decode('utf-8'))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise SaveDataError(f"Undecodable wear map: {e}")

    if not isinstance(payload, dict) or not isinstance(payload.get('entries'), list):
        raise SaveDataError("Wear map must be an object with an 'entries' list")

    version = payload.get('version', FORMAT_VERSION)
    # bool is an int subclass but never a version
    if isinstance(version, bool) or not isinstance(version, int):
        raise SaveDataError(f"Wear map version must be an integer, got {version!r}")
    if version > FORMAT_VERSION:
        raise SaveDataError(f"Unsupported wear map version {version}")

    records: Dict[BlockPos, WearRecord] = {}
    for index, entry in enumerate(payload['entries']):
        try:
            pos = BlockPos.from_list(entry['pos'])
            record = WearRecord(
                wear_level=int(entry['wear_level']),
                last_update_hours=float(entry['last_update_hours']),
                original_block_code=str(entry.get('original_block_code') or ""),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise SaveDataError(f"Bad entry #{index}: {e!r}")
        records[pos] = record

    return records


def store_wear_map(save_game: 'SaveGame', key: str, store: WearStore) -> int:
    """Write the whole store to the save game. Returns the entry count."""
    save_game.store_data(key, serialize_wear_map(store.snapshot()))
    return len(store)


def load_wear_map(save_game: 'SaveGame', key: str, store: WearStore) -> Optional[int]:
    """
    Replace the store's contents from the save game.

    Returns:
        Number of entries loaded, or None if the save has no data under
        ``key`` (the store is left untouched)

    Raises:
        SaveDataError: If stored data exists but is malformed
    """
    blob = save_game.get_data(key)
    if blob is None:
        return None

    try:
        records = deserialize_wear_map(blob)
    except SaveDataError as e:
        raise SaveDataError(e.message, key=key)

    store.replace(records)
    return len(records)


class SaveGame:
    """
    In-memory key/blob world save.

    Example:
        >>> save = SaveGame()
        >>> save.store_data("desirepaths", b"{}")
        >>> save.get_data("desirepaths")
        b'{}'
        >>> save.get_data("missing") is None
        True
    """

    def __init__(self):
        self._data: Dict[str, bytes] = {}

    def get_data(self, key: str) -> Optional[bytes]:
        return self._data.get(key)

    def store_data(self, key: str, blob: bytes) -> None:
        self._data[key] = bytes(blob)

    def keys(self) -> List[str]:
        return list(self._data.keys())

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __repr__(self) -> str:
        return f"SaveGame(keys={self.keys()})"
