from __future__ import annotations

from feedsource.uri import ensure_trailing_slash


def join_key(feed_sub_path: str | None, key: str) -> str:
    """Prefix ``key`` with the feed sub path, if any."""
    key = key.lstrip("/")
    prefix = (feed_sub_path or "").strip("/")
    return f"{prefix}/{key}" if prefix else key


def join_uri(base: str, feed_sub_path: str | None, key: str) -> str:
    return f"{ensure_trailing_slash(base)}{join_key(feed_sub_path, key)}"


__all__ = ["join_key", "join_uri"]
