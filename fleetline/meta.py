import hashlib
from dataclasses import astuple

import yaml
from loguru import logger

import fleetline.settings as settings

META_KEYS = ("_last_anchor", "snapshot_hash")


def load_meta(meta_file=None) -> dict:
    """
    Load render metadata. Return {} if missing or invalid.
    """
    meta_file = meta_file or settings.META_FILE
    if meta_file.exists() and meta_file.is_file():
        try:
            data = yaml.safe_load(meta_file.read_text())
            if isinstance(data, dict):
                return {k: v for k, v in data.items() if k in META_KEYS}
        except Exception as e:
            logger.warning("Failed to parse meta file: {}, using empty metadata.", e)
    return {}


def save_meta(meta: dict, meta_file=None) -> None:
    """
    Save render metadata, only writing expected keys.
    """
    meta_file = meta_file or settings.META_FILE
    to_write = {k: meta[k] for k in META_KEYS if k in meta}
    try:
        meta_file.parent.mkdir(parents=True, exist_ok=True)
        meta_file.write_text(yaml.safe_dump(to_write))
    except Exception as e:
        logger.warning("Failed to write meta file: {}", e)


def compute_snapshot_hash(snapshot) -> str:
    """
    Content hash of a snapshot. Item order does not matter; opaque item
    metadata is ignored.
    """
    h = hashlib.sha256()
    for section in (snapshot.groups, snapshot.resources):
        for entry in section:
            h.update(repr(astuple(entry)).encode())
    for item in sorted(snapshot.items, key=lambda i: i.id):
        fields = astuple(item)[:-1]  # drop meta
        h.update(repr(fields).encode())
    for kind in sorted(snapshot.colors, key=lambda k: k.value):
        h.update(f"{kind.value}={snapshot.colors[kind]}".encode())
    return h.hexdigest()
