"""Load ServeConfig from mdserve.toml / mdserve.yaml if present.

Merges file config with CLI kwargs. CLI overrides file.
"""

from __future__ import annotations

from pathlib import Path

from mdserve.config import ServeConfig

_CONFIG_KEYS = frozenset({
    "host", "port", "watch", "open_browser", "max_file_size",
    "stability_ms", "poll_interval_ms", "highlight",
})


def load_config(file: str | Path, **overrides: object) -> ServeConfig:
    """Load ServeConfig for *file*, optionally merging a config file.

    Looks for mdserve.toml, mdserve.yaml or mdserve.yml next to the document.
    If found, loads and merges with overrides. Overrides take precedence;
    ``None`` overrides are dropped so unset CLI flags don't mask the file.
    """
    path = Path(file).resolve()
    file_config = _read_mdserve_config(path.parent)
    merged = {**file_config, **{k: v for k, v in overrides.items() if v is not None}}
    return ServeConfig(file=path, **merged)


def _read_mdserve_config(directory: Path) -> dict[str, object]:
    """Read mdserve config from toml/yaml if present. Returns empty dict otherwise."""
    toml_path = directory / "mdserve.toml"
    if toml_path.is_file():
        return _parse_toml(toml_path)
    for name in ("mdserve.yaml", "mdserve.yml"):
        path = directory / name
        if path.is_file():
            return _parse_yaml(path)
    return {}


def _parse_yaml(path: Path) -> dict[str, object]:
    """Parse YAML config. Returns empty dict on error."""
    import yaml

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError):
        return {}
    if not isinstance(data, dict):
        return {}
    return _flatten_mdserve_section(data)


def _parse_toml(path: Path) -> dict[str, object]:
    """Parse TOML config. Returns empty dict on error."""
    import tomllib

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError):
        return {}
    return _flatten_mdserve_section(data)


def _flatten_mdserve_section(data: dict[str, object]) -> dict[str, object]:
    """Extract mdserve.* keys into top-level config, dropping unknown keys."""
    result: dict[str, object] = {}
    for k, v in data.items():
        if k in _CONFIG_KEYS:
            result[k] = v
    section = data.get("mdserve")
    if isinstance(section, dict):
        for k, v in section.items():
            if k in _CONFIG_KEYS:
                result[k] = v
    return result
