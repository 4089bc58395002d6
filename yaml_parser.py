# yaml_parser.py
import logging
from typing import Any

import yaml
from pydantic import ValidationError

from models import StoryMeta

logger = logging.getLogger(__name__)

# Alternative spellings accepted in story metadata files.
STORY_META_KEY_ALIASES = {
    "主人公": "protagonist",
    "ジャンル": "genre",
    "テーマ": "theme",
    "象徴": "symbols",
    "モチーフ": "symbols",
    "keycharacters": "key_characters",
    "主要キャラクター": "key_characters",
}


def normalize_keys_recursive(data: Any) -> Any:
    """
    Recursively normalizes keys in a dictionary to lowercase and replaces spaces
    with underscores, so "Key Characters" and "key_characters" are equivalent.
    """
    if isinstance(data, dict):
        new_dict = {}
        for key, value in data.items():
            normalized_key = str(key).strip().lower().replace(" ", "_")
            new_dict[normalized_key] = normalize_keys_recursive(value)
        return new_dict
    elif isinstance(data, list):
        return [normalize_keys_recursive(item) for item in data]
    else:
        return data


def load_yaml_file(filepath: str, normalize_keys: bool = True) -> dict[str, Any] | None:
    """
    Loads and parses a YAML file.

    Args:
        filepath: Path to the YAML file.
        normalize_keys: Whether to recursively normalize dictionary keys
                        (lowercase, spaces to underscores). Defaults to True.

    Returns:
        A dictionary representing the YAML content, or None if an error occurs.
    """
    if not filepath.endswith((".yaml", ".yml")):
        logger.error(f"File specified is not a YAML file: {filepath}")
        return None
    try:
        with open(filepath, encoding="utf-8") as f:
            content = yaml.safe_load(f)
    except FileNotFoundError:
        logger.warning(f"YAML file '{filepath}' not found.")
        return None
    except yaml.YAMLError as e:
        logger.error(f"Error parsing YAML file {filepath}: {e}", exc_info=True)
        return None

    if content is None:  # Empty file
        return {}
    if not isinstance(content, dict):
        logger.error(
            f"YAML file {filepath} must have a dictionary as its root element. Parsed type: {type(content)}"
        )
        return None

    if normalize_keys:
        return normalize_keys_recursive(content)
    return content


def _as_text(value: Any) -> str:
    """Story metadata fields are free text; lists are joined with '、'."""
    if value is None:
        return ""
    if isinstance(value, list):
        return "、".join(str(item) for item in value)
    return str(value).strip()


def load_story_meta(filepath: str) -> StoryMeta | None:
    """
    Load the evaluation premise (protagonist, genre, theme, symbols,
    key characters) from a YAML file. Returns None when the file is missing,
    malformed or lacks a protagonist.
    """
    data = load_yaml_file(filepath)
    if data is None:
        return None

    fields: dict[str, str] = {}
    for key, value in data.items():
        field_name = STORY_META_KEY_ALIASES.get(key, key)
        if field_name in StoryMeta.model_fields:
            fields[field_name] = _as_text(value)

    try:
        return StoryMeta(**fields)
    except ValidationError as e:
        logger.error(f"Invalid story metadata in {filepath}: {e}")
        return None
