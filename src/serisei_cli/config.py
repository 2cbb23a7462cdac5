import configparser
import re
import tomllib
from pathlib import Path
from typing import Any

from loguru import logger
from pydantic import ValidationError
from serisei_formatter.models import FormatterConfig

CONFIG_FILENAME = ".seriseirc"
PYPROJECT_FILENAME = "pyproject.toml"
TOOL_TABLE = "serisei"

# .seriseirc keys -> FormatterConfig fields
RC_KEYS = {
    "HEADER_CHAR": "header_char",
    "TO_COLUMN_WIDTH": "column_width",
    "EXPAND_METHODS": "expand_methods",
    "INDENT_TYPE": "indent_type",
    "INDENT_SIZE": "indent_size",
    "REFLOW_IMPORTS": "reflow_imports",
}

_SETTINGS_SECTION = "settings"
_GROUPS_SECTION = "groups"


def _search_dirs(start_path: Path) -> list[Path]:
    start = start_path.resolve()
    directory = start if start.is_dir() else start.parent
    return [directory, *directory.parents]


def _has_tool_table(path: Path) -> bool:
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError):
        return False
    return TOOL_TABLE in data.get("tool", {})


def find_config_file(start_path: Path) -> Path | None:
    """Nearest .seriseirc above ``start_path``, else the nearest pyproject.toml with [tool.serisei]"""
    directories = _search_dirs(start_path)
    for directory in directories:
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    for directory in directories:
        candidate = directory / PYPROJECT_FILENAME
        if candidate.is_file() and _has_tool_table(candidate):
            return candidate
    return None


def group_label(name: str) -> str:
    """Normalizes a group name to its ``// NAME`` header label"""
    return "// " + re.sub(r"^//\s*", "", name.strip()).upper()


def _read_rc(path: Path) -> dict[str, Any]:
    parser = configparser.ConfigParser(
        interpolation=None,
        delimiters=("=",),
        comment_prefixes=("#", ";"),
        strict=False,
        default_section="__none__",
    )
    parser.optionxform = str
    parser.read_string(f"[{_SETTINGS_SECTION}]\n" + path.read_text(encoding="utf-8"), source=str(path))

    values: dict[str, Any] = {}
    groups = []
    for section in parser.sections():
        if section.strip().lower() == _GROUPS_SECTION:
            for name, matchers in parser.items(section):
                groups.append({
                    "label": group_label(name),
                    "matchers": [m.strip() for m in matchers.split(",") if m.strip()],
                })
        elif section == _SETTINGS_SECTION:
            for key, value in parser.items(section):
                field = RC_KEYS.get(key.strip().upper())
                if field is None:
                    logger.debug(f"{path}: ignoring unknown key {key}")
                    continue
                values[field] = value.strip()
    if groups:
        values["groups"] = groups
    return values


def _read_pyproject(path: Path) -> dict[str, Any]:
    with open(path, "rb") as f:
        data = tomllib.load(f)
    table = dict(data.get("tool", {}).get(TOOL_TABLE, {}))

    groups = table.pop("groups", None)
    values = {key: value for key, value in table.items() if key in FormatterConfig.model_fields}
    if isinstance(groups, dict) and groups:
        values["groups"] = [
            {"label": group_label(name), "matchers": list(matchers)}
            for name, matchers in groups.items()
        ]
    return values


def _build_config(values: dict[str, Any], source: Path) -> FormatterConfig:
    accepted = {}
    for field, value in values.items():
        try:
            FormatterConfig(**{field: value})
        except ValidationError as e:
            logger.warning(f"{source}: invalid value for {field} ({value!r}), using default: {e.errors()[0]['msg']}")
            continue
        accepted[field] = value
    return FormatterConfig(**accepted)


def load_config(start_path: Path) -> FormatterConfig:
    """Loads the configuration that applies to ``start_path``, or the defaults"""
    path = find_config_file(start_path)
    if path is None:
        return FormatterConfig()

    try:
        if path.name == PYPROJECT_FILENAME:
            values = _read_pyproject(path)
        else:
            values = _read_rc(path)
    except (OSError, UnicodeDecodeError, configparser.Error, tomllib.TOMLDecodeError) as e:
        logger.warning(f"Error reading {path}, using defaults: {e}")
        return FormatterConfig()

    logger.debug(f"Using configuration from {path}")
    return _build_config(values, path)
