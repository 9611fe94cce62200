"""
Evaluation context handed to the block pipeline.

The context is a handle, not a value: the pipeline reads state through it and
only writes root state through the explicit mutator. It is never copied, so
concurrent processing of sibling blocks sees one shared root state.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from .evaluator.proxies import StateProxy

StateSetter = Callable[[Any], Any]


class EvaluationContext:
    """
    State and ambient data visible to binding expressions.

    Attributes:
        local_state: Block-scoped variables (repeat items, component state)
        root_state: Page/app-level state
        set_root_state: Mutator bound to root_state (None for read-only renders)
        context: Ambient render data (locale, nonce, feature flags)

    Example:
        ctx = EvaluationContext(root_state={"name": "World", "locale": "fr"})
        ctx.active_locale  # "fr"
        ctx.scope()["state"]["name"]  # "World"
    """

    def __init__(
        self,
        local_state: Mapping[str, Any] | None = None,
        root_state: Mapping[str, Any] | None = None,
        set_root_state: StateSetter | None = None,
        context: Mapping[str, Any] | None = None,
        locale: str | None = None,
    ):
        self.local_state = local_state if local_state is not None else {}
        self.root_state = root_state if root_state is not None else {}
        self.set_root_state = set_root_state
        self.context = context if context is not None else {}
        self._locale = locale

    @property
    def active_locale(self) -> str | None:
        """Explicit locale, then ambient context locale, then root state locale."""
        if self._locale:
            return self._locale
        for source in (self.context, self.root_state):
            locale = source.get("locale")
            if isinstance(locale, str) and locale:
                return locale
        return None

    def scope(self) -> dict[str, Any]:
        """
        Names visible to expressions.

        ``state`` is a live view with local state shadowing root state; no
        mapping is copied.
        """
        return {
            "state": StateProxy(self.local_state, self.root_state),
            "local_state": self.local_state,
            "root_state": self.root_state,
            "set_state": self.set_root_state or _read_only_setter,
            "context": self.context,
        }

    def __repr__(self) -> str:
        return (
            f"EvaluationContext(local_keys={sorted(self.local_state)}, "
            f"root_keys={sorted(self.root_state)}, locale={self.active_locale!r})"
        )


def _read_only_setter(_value: Any) -> None:
    raise RuntimeError("Root state is read-only in this render context")


__all__ = ["EvaluationContext", "StateSetter"]
