"""
Proxy objects exposed to binding expressions.

    - StateProxy: Merged read view over local and root state

Example:
    state = StateProxy({"item": {"title": "A"}}, {"items": [1, 2], "item": None})
    state.item   # {"title": "A"} (local shadows root)
    state.items  # [1, 2] (a state key, not the Mapping.items method)
"""

from collections.abc import Iterator, Mapping
from typing import Any


class ProxyBase:
    """Base class for read-only proxy objects."""

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__name__} is read-only")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"{type(self).__name__} is read-only")


class StateProxy(ProxyBase):
    """
    Read view of local state layered over root state.

    Keys win over methods: the proxy exposes no public attributes of its own,
    so ``state.items`` or ``state.keys`` always look up state entries. Neither
    mapping is copied; writes go through the ``set_state`` mutator only.

    Lookup order:
    1. Local state (block-scoped variables)
    2. Root state (page/app-level state)
    """

    def __init__(self, local_state: Mapping[str, Any], root_state: Mapping[str, Any]):
        object.__setattr__(self, "_maps", (local_state, root_state))

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self[name]
        except KeyError:
            raise AttributeError(name) from None

    def __getitem__(self, key: str) -> Any:
        for mapping in object.__getattribute__(self, "_maps"):
            if key in mapping:
                return mapping[key]
        raise KeyError(key)

    def __contains__(self, key: object) -> bool:
        return any(key in mapping for mapping in object.__getattribute__(self, "_maps"))

    def __iter__(self) -> Iterator[str]:
        seen: set[str] = set()
        for mapping in object.__getattribute__(self, "_maps"):
            for key in mapping:
                if key not in seen:
                    seen.add(key)
                    yield key

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def __repr__(self) -> str:
        return f"StateProxy(keys={list(self)})"


__all__ = ["ProxyBase", "StateProxy"]
