from collections.abc import Mapping
from typing import Any, Callable, Iterable, Optional

from synesthesia.config.constants import MAX_RESOLVE_DEPTH
from synesthesia.config.logger import get_logger

logger = get_logger(__name__)

Acceptor = Callable[[Any], bool]


def _is_nested(value: Any) -> bool:
    return isinstance(value, (Mapping, list, tuple))


def find_value_by_key(
    data: Any,
    candidates: Iterable[str],
    max_depth: int = MAX_RESOLVE_DEPTH,
    accept: Optional[Acceptor] = None,
) -> Optional[Any]:
    """
    Search a nested JSON-like structure for the first truthy value stored under
    any of the candidate labels.

    Labels are compared case-insensitively. Candidates are tried in the given
    order at the current level before descending into child mappings and
    sequences, which are visited in their natural order.

    Falsy values (``""``, ``None``, ``0``, ``False``, empty containers) are
    treated as missing. So is any value ``accept`` rejects; the search then
    carries on as if the label were absent.

    Args:
        data: Decoded JSON value (mapping, sequence or scalar)
        candidates: Labels in priority order
        max_depth: Levels below ``data`` that may still be searched
        accept: Optional predicate a matching value must satisfy

    Returns:
        The matching value, or None when no label resolves
    """
    labels = [c.lower() for c in candidates]
    return _resolve(data, labels, max_depth, accept)


def _resolve(
    data: Any, labels: list[str], depth_left: int, accept: Optional[Acceptor]
) -> Optional[Any]:
    if depth_left < 0:
        logger.debug("Key resolver depth limit reached")
        return None

    if isinstance(data, Mapping):
        normalized = {str(key).lower(): value for key, value in data.items()}

        for label in labels:
            value = normalized.get(label)
            if value and (accept is None or accept(value)):
                return value

        children = data.values()
    elif isinstance(data, (list, tuple)):
        children = data
    else:
        return None

    for child in children:
        if not _is_nested(child):
            continue
        found = _resolve(child, labels, depth_left - 1, accept)
        if found:
            return found

    return None
