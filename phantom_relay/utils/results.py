"""
Result normalization and merging.

PhantomBuster agents return profiles in different shapes:
- A bare JSON array
- An object holding the array under results/data/profiles/...
- Either of the above serialized as a JSON string

Nothing is ever fabricated: a payload with no recognizable list becomes [].
"""

import json
from typing import Any

from phantom_relay.store.batches import Run

LIST_FIELDS = ("results", "data", "profiles", "items", "resultObject", "output")

IDENTITY_FIELDS = (
    "profileUrl",
    "linkedInProfileUrl",
    "linkedinProfileUrl",
    "publicProfileUrl",
    "url",
    "profileLink",
    "link",
)


def normalize(payload: Any) -> list:
    """
    Coerce a result payload into a flat list.

    Args:
        payload: Raw result as returned by PhantomBuster (or None)

    Returns:
        The payload itself if it is a list, the first list found under
        LIST_FIELDS if it is an object, otherwise an empty list
    """
    if isinstance(payload, list):
        return payload

    if isinstance(payload, str):
        try:
            decoded = json.loads(payload)
        except json.JSONDecodeError:
            return []
        # Only one level of string decoding
        return decoded if isinstance(decoded, list) else _list_from_fields(decoded)

    return _list_from_fields(payload)


def _list_from_fields(payload: Any) -> list:
    if not isinstance(payload, dict):
        return []
    for field in LIST_FIELDS:
        value = payload.get(field)
        if isinstance(value, list):
            return value
    return []


def identity_key(item: Any) -> str:
    """Dedupe key: first URL-like field, else the item serialized as JSON."""
    if isinstance(item, dict):
        for field in IDENTITY_FIELDS:
            value = item.get(field)
            if value:
                return f"url:{value}"
    # Weak key: dicts with the same fields in a different order do not collide
    return "json:" + json.dumps(item, default=str)


def dedupe(items: list) -> list:
    """Keep the first occurrence of each identity key, preserving order."""
    seen: set[str] = set()
    unique = []
    for item in items:
        key = identity_key(item)
        if key in seen:
            continue
        seen.add(key)
        unique.append(item)
    return unique


def truncate(items: list, max_items: int) -> list:
    """Keep the first max_items entries."""
    if max_items <= 0:
        return []
    return items[:max_items]


def merge_runs(runs: list[Run], max_results: int) -> tuple[list, dict[str, list]]:
    """
    Merge the results of several runs.

    Returns:
        (merged, per_title): merged is deduplicated across runs in run order and
        truncated; per_title maps each run's title to its own truncated list
    """
    combined = []
    per_title: dict[str, list] = {}
    for run in runs:
        items = normalize(run.result)
        per_title[run.title] = truncate(items, max_results)
        combined.extend(items)

    return truncate(dedupe(combined), max_results), per_title
