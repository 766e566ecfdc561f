"""Full JSON dump and reload of every collection in a store."""

import logging
from pathlib import Path

import simplejson as json  # type: ignore

from .store import Collection, Store

logger = logging.getLogger(__name__)


def dump(store: Store) -> str:
    data = {c.value: store.get_all(c) for c in Collection}
    return json.dumps(data, indent=2, ensure_ascii=False)


def restore(store: Store, text: str) -> None:
    """Replace contents of every collection with the dump in *text*."""
    data = json.loads(text)
    with store.transaction():
        for c in Collection:
            store.clear(c)
            for record in data.get(c.value, []):
                store.put(c, record, record.get("id"))
    logger.info("Restored %d collections", len(data))


def save(store: Store, filename: str | Path, allow_overwrite: bool = False):
    if not allow_overwrite and Path(filename).exists():
        raise FileExistsError(f"File already exists: {filename}")
    Path(filename).write_text(dump(store), encoding="utf-8")


def load(store: Store, filename: str | Path):
    restore(store, Path(filename).read_text(encoding="utf-8"))
