"""
Binding target paths.

A binding path addresses a location in a block's own fields using dotted and
indexed syntax:

    properties.text
    component.options.items[0].label
    responsiveStyles.large['background-color']

The first segment names a Block attribute (field name, wire alias, or extra
attribute). Remaining segments walk mappings (string keys) and lists (integer
indexes). Writes create missing intermediate containers and pad lists with
None; they never enter the shared region (children, meta) or embedded
elements.
"""

import re
from collections.abc import MutableMapping
from typing import Any

from .block import SHARED_FIELDS, Block, is_embedded_element
from .exceptions import BindingPathError

PathToken = str | int

_TOKEN = re.compile(
    r"""
      (?P<dot>\.)
    | \[(?P<index>-?\d+)\]
    | \[(?P<quote>['"])(?P<key>.*?)(?P=quote)\]
    | (?P<name>[^.\[\]]+)
    """,
    re.VERBOSE,
)


def parse_path(path: str) -> list[PathToken]:
    """
    Split a binding path into tokens.

    Raises:
        BindingPathError: On empty paths, dangling dots, malformed brackets,
            or negative list indexes
    """
    if not path:
        raise BindingPathError(path, "empty path")

    tokens: list[PathToken] = []
    pos = 0
    after_dot = True  # A name is required at the start and after each dot
    while pos < len(path):
        match = _TOKEN.match(path, pos)
        if match is None:
            raise BindingPathError(path, f"invalid syntax at position {pos}")
        if match.group("dot"):
            if after_dot:
                raise BindingPathError(path, f"unexpected '.' at position {pos}")
            after_dot = True
        elif match.group("name") is not None:
            if not after_dot:
                raise BindingPathError(path, f"missing '.' before position {pos}")
            tokens.append(match.group("name"))
            after_dot = False
        elif match.group("index") is not None:
            if after_dot and tokens:
                raise BindingPathError(path, f"unexpected '[' after '.' at position {pos}")
            index = int(match.group("index"))
            if index < 0:
                raise BindingPathError(path, f"negative list index {index}")
            tokens.append(index)
            after_dot = False
        else:
            if after_dot and tokens:
                raise BindingPathError(path, f"unexpected '[' after '.' at position {pos}")
            tokens.append(match.group("key"))
            after_dot = False
        pos = match.end()

    if after_dot:
        raise BindingPathError(path, "path ends with '.'")
    if not isinstance(tokens[0], str):
        raise BindingPathError(path, "path must start with a block field name")
    return tokens


def _build(tokens: list[PathToken], value: Any) -> Any:
    """Build the missing container chain for ``tokens`` with ``value`` at the leaf."""
    for token in reversed(tokens):
        if isinstance(token, int):
            value = [None] * token + [value]
        else:
            value = {token: value}
    return value


def _read(target: Any, token: PathToken, path: str) -> Any:
    if isinstance(target, MutableMapping):
        return target.get(str(token) if isinstance(token, int) else token)
    if isinstance(target, list):
        if not isinstance(token, int):
            raise BindingPathError(path, f"list index expected, got '{token}'")
        return target[token] if token < len(target) else None
    raise BindingPathError(path, f"cannot traverse {type(target).__name__} at '{token}'")


def _write(target: Any, token: PathToken, value: Any, path: str) -> None:
    if isinstance(target, MutableMapping):
        target[str(token) if isinstance(token, int) else token] = value
        return
    if isinstance(target, list):
        if not isinstance(token, int):
            raise BindingPathError(path, f"list index expected, got '{token}'")
        if token >= len(target):
            target.extend([None] * (token + 1 - len(target)))
        target[token] = value
        return
    raise BindingPathError(path, f"cannot set '{token}' on {type(target).__name__}")


def _check_container(value: Any, token: PathToken, path: str) -> None:
    if is_embedded_element(value):
        raise BindingPathError(path, f"'{token}' is an embedded element")
    if not isinstance(value, (MutableMapping, list)):
        raise BindingPathError(path, f"cannot traverse {type(value).__name__} at '{token}'")


def set_path(block: Block, path: str, value: Any) -> None:
    """
    Write ``value`` at ``path`` on ``block`` in place.

    Existing containers are only traversed. The missing part of the path is
    built detached and attached by the single final write, so a rejected
    write leaves the block unchanged.

    Args:
        block: Block to modify (the pipeline only ever passes its own clone)
        path: Binding target path
        value: Value to write; existing scalars are overwritten

    Raises:
        BindingPathError: If the path is malformed, targets children/meta,
            or traverses a non-container value
    """
    tokens = parse_path(path)
    head = str(tokens[0])
    attr = Block.field_for(head)
    if attr in SHARED_FIELDS:
        raise BindingPathError(path, f"'{head}' is shared and cannot be bound")

    if len(tokens) == 1:
        setattr(block, attr, value)
        return

    target = getattr(block, attr, None)
    if target is None:
        setattr(block, attr, _build(tokens[1:], value))
        return
    _check_container(target, head, path)

    for position in range(1, len(tokens) - 1):
        token = tokens[position]
        child = _read(target, token, path)
        if child is None:
            _write(target, token, _build(tokens[position + 1 :], value), path)
            return
        _check_container(child, token, path)
        target = child

    _write(target, tokens[-1], value, path)


def get_path(block: Block, path: str, default: Any = None) -> Any:
    """Read the value at ``path`` on ``block``, returning ``default`` when absent."""
    tokens = parse_path(path)
    value: Any = getattr(block, Block.field_for(str(tokens[0])), None)
    for token in tokens[1:]:
        if value is None:
            return default
        try:
            value = _read(value, token, path)
        except BindingPathError:
            return default
    return default if value is None else value


__all__ = ["PathToken", "parse_path", "set_path", "get_path"]
