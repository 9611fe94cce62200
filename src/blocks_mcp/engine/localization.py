"""
Localized value resolution.

A localized value is a mapping tagged with ``@type`` LocalizedValue whose other
keys are locale codes, plus an optional ``Default`` entry:

    {"@type": "@builder.io/core:LocalizedValue", "Default": "Hi", "en": "Hi", "fr": "Salut"}

Resolution replaces every such wrapper, at any nesting depth inside a block's
own fields, with one plain value. Selection order:

1. Active locale
2. Configured default locale (e.g. "en")
3. The wrapper's ``Default`` entry
4. The first remaining locale variant
5. None (the field is never dropped)

Children, meta and embedded elements are not walked. The input block is never
modified: changed containers are rebuilt copy-on-write and the input block is
returned as-is when nothing was substituted.
"""

from collections.abc import Mapping
from typing import Any

from .block import Block, is_embedded_element
from .diagnostics import DiagnosticSink, LocalizationMiss, MissKind, NullDiagnosticSink

LOCALIZED_VALUE_TYPE = "@builder.io/core:LocalizedValue"
DEFAULT_VARIANT_KEY = "Default"
# One stack frame per nesting level; must stay well below sys.getrecursionlimit()
MAX_DEPTH_LIMIT = 500
DEFAULT_MAX_DEPTH = MAX_DEPTH_LIMIT


def is_localized_value(value: Any) -> bool:
    """True for mappings tagged as localized values."""
    return isinstance(value, Mapping) and value.get("@type") == LOCALIZED_VALUE_TYPE


def select_variant(
    wrapper: Mapping[str, Any],
    active_locale: str | None,
    default_locale: str | None = None,
) -> tuple[Any, str | None]:
    """
    Pick the value of a localized wrapper.

    Returns:
        Tuple of (value, key used); key is None when no variant exists
    """
    for key in (active_locale, default_locale, DEFAULT_VARIANT_KEY):
        if key is not None and key in wrapper:
            return wrapper[key], key
    for key, value in wrapper.items():
        if key != "@type":
            return value, key
    return None, None


class _LocaleWalker:
    """Single-use walker carrying the resolution settings for one block."""

    def __init__(
        self,
        block_id: str | None,
        active_locale: str | None,
        default_locale: str | None,
        sink: DiagnosticSink,
        max_depth: int,
    ):
        self.block_id = block_id
        self.active_locale = active_locale
        self.default_locale = default_locale
        self.sink = sink
        self.max_depth = max_depth
        self.wrappers_found = 0

    def walk(self, value: Any, path: str, depth: int) -> Any:
        if depth > self.max_depth:
            if isinstance(value, (Mapping, list, tuple)):
                self.report_miss(path, "depth_exceeded", f"nesting deeper than {self.max_depth}")
            return value

        if is_localized_value(value):
            return self.walk(self._select(value, path), path, depth + 1)

        if is_embedded_element(value):
            return value

        if isinstance(value, dict):
            changed: dict[str, Any] | None = None
            for key, item in value.items():
                resolved = self.walk(item, f"{path}.{key}", depth + 1)
                if resolved is not item:
                    if changed is None:
                        changed = dict(value)
                    changed[key] = resolved
            return value if changed is None else changed

        if isinstance(value, (list, tuple)):
            items: list[Any] | None = None
            for index, item in enumerate(value):
                resolved = self.walk(item, f"{path}[{index}]", depth + 1)
                if resolved is not item:
                    if items is None:
                        items = list(value)
                    items[index] = resolved
            if items is None:
                return value
            return items if isinstance(value, list) else tuple(items)

        return value

    def _select(self, wrapper: Mapping[str, Any], path: str) -> Any:
        self.wrappers_found += 1
        value, key = select_variant(wrapper, self.active_locale, self.default_locale)
        if self.active_locale is not None and key != self.active_locale:
            if key is None:
                message = f"no variant for '{self.active_locale}' and no fallback"
            else:
                message = f"no variant for '{self.active_locale}', used '{key}'"
            self.report_miss(path, "missing_variant", message)
        return value

    def report_miss(self, path: str, kind: MissKind, message: str) -> None:
        self.sink.report(
            LocalizationMiss(
                block_id=self.block_id,
                path=path,
                locale=self.active_locale,
                kind=kind,
                message=message,
            )
        )


def resolve_locale(
    block: Block,
    active_locale: str | None,
    *,
    default_locale: str | None = None,
    sink: DiagnosticSink | None = None,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> Block:
    """
    Replace localized values on a block with the variant for ``active_locale``.

    Args:
        block: Block to resolve (never modified)
        active_locale: Locale code, or None to resolve through the defaults
        default_locale: Locale used when the active locale has no variant
        sink: Receiver for localization misses
        max_depth: Maximum nesting depth walked inside a field (capped at
            MAX_DEPTH_LIMIT)

    Returns:
        New Block if at least one value was substituted, otherwise ``block``
    """
    walker = _LocaleWalker(
        block.id,
        active_locale,
        default_locale,
        sink or NullDiagnosticSink(),
        min(max_depth, MAX_DEPTH_LIMIT),
    )

    updates: dict[str, Any] = {}
    for name, value in block.own_fields().items():
        resolved = walker.walk(value, name, 0)
        if resolved is not value:
            updates[name] = resolved

    if walker.wrappers_found and active_locale is None:
        walker.report_miss(
            "*",
            "missing_locale",
            f"{walker.wrappers_found} localized value(s) resolved without an active locale; "
            "pass a locale to resolve localized fields",
        )

    if not updates:
        return block
    return block.model_copy(update=updates)


__all__ = [
    "LOCALIZED_VALUE_TYPE",
    "DEFAULT_VARIANT_KEY",
    "DEFAULT_MAX_DEPTH",
    "MAX_DEPTH_LIMIT",
    "is_localized_value",
    "select_variant",
    "resolve_locale",
]
