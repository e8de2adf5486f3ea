"""Name helpers shared by the service builders and the registrar."""
from __future__ import annotations


def truncate(name: str, length: int = 10) -> str:
    """Short container id, as used for SkyDNS uuids."""
    return name[:length]


def remove_tag(name: str) -> str:
    return name.split(":", 1)[0]


def remove_slash(name: str) -> str:
    """Docker reports container names as '/web_1'; drop that one leading slash."""
    if name.startswith("/"):
        return name[1:]
    return name


def clean_image_name(image: str) -> str:
    """Short service name for an image reference.

    'registry.io/org/app:1.2' -> 'app', 'redis:latest' -> 'redis'.
    """
    return remove_tag(image.rsplit("/", 1)[-1])
