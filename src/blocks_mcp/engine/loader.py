"""
Block loader.

Reads content from YAML or JSON (JSON is valid YAML) and validates it into
Block models. Accepted document shapes:

- A single block: {"@type": "@builder.io/sdk:Element", "id": ..., ...}
- A list of blocks: [{...}, {...}]
- A content entry: {"data": {"blocks": [{...}, ...]}}
"""

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .block import Block
from .load_result import LoadResult

logger = logging.getLogger(__name__)


def parse_blocks(data: Any, source: str = "<data>") -> LoadResult[list[Block]]:
    """
    Validate already-parsed content into blocks.

    Args:
        data: Parsed document (dict or list)
        source: Source identifier for error messages

    Returns:
        LoadResult.success(list[Block]) or LoadResult.failure(error_message)
    """
    if isinstance(data, dict) and isinstance(data.get("data"), dict) and "blocks" in data["data"]:
        raw_blocks = data["data"]["blocks"]
    elif isinstance(data, dict):
        raw_blocks = [data]
    elif isinstance(data, list):
        raw_blocks = data
    else:
        return LoadResult.failure(
            f"Content {source} must be a block, a list of blocks, or a content entry, "
            f"got {type(data).__name__}"
        )

    if not isinstance(raw_blocks, list):
        return LoadResult.failure(f"Content {source} data.blocks must be a list")

    blocks: list[Block] = []
    for index, raw in enumerate(raw_blocks):
        try:
            blocks.append(Block.model_validate(raw))
        except ValidationError as e:
            return LoadResult.failure(f"Block {index} in {source} is invalid:\n{e}")

    return LoadResult.success(blocks, metadata={"source": source, "count": len(blocks)})


def load_blocks_from_yaml(content: str, source: str = "<string>") -> LoadResult[list[Block]]:
    """
    Load blocks from YAML or JSON text.

    Example:
        content = '{"id": "b1", "bindings": {"properties.text": "state.title"}}'
        result = load_blocks_from_yaml(content)
        block = result.unwrap()[0]
    """
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        return LoadResult.failure(f"Invalid YAML syntax in {source}: {e}")

    return parse_blocks(data, source=source)


def load_blocks_from_file(file_path: str | Path) -> LoadResult[list[Block]]:
    """Load blocks from a YAML or JSON file."""
    path = Path(file_path)

    if not path.exists():
        return LoadResult.failure(f"Content file not found: {file_path}")
    if not path.is_file():
        return LoadResult.failure(f"Path is not a file: {file_path}")

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        return LoadResult.failure(f"Failed to read file '{file_path}': {e}")

    result = load_blocks_from_yaml(content, source=str(file_path))
    if result.is_success:
        logger.debug(f"Loaded {len(result.unwrap())} block(s) from {file_path}")
    return result


__all__ = ["parse_blocks", "load_blocks_from_yaml", "load_blocks_from_file"]
