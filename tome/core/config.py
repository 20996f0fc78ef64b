"""Configuration loading, saving and validation for config.yaml."""
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Set
import yaml

from tome.core.errors import ConfigError
from tome.models.skill import Source, SourceKind, Target, TargetMethod

CONFIG_FILENAME = "config.yaml"


def default_config_path() -> Path:
    """Default config file path: ~/.config/tome/config.yaml"""
    return Path.home() / ".config" / "tome" / CONFIG_FILENAME


def default_library_dir() -> Path:
    return Path.home() / ".local" / "share" / "tome" / "skills"


def expand_tilde(path: Path) -> Path:
    """Expand a leading ``~`` to the user's home directory."""
    parts = path.parts
    if parts and parts[0] == "~":
        return Path.home().joinpath(*parts[1:])
    return path


@dataclass
class Config:
    """Complete config.yaml representation."""

    library_dir: Path = field(default_factory=default_library_dir)
    exclude: Set[str] = field(default_factory=set)
    sources: List[Source] = field(default_factory=list)
    targets: Dict[str, Target] = field(default_factory=dict)
    config_file: Optional[Path] = None

    @property
    def is_configured(self) -> bool:
        """Whether a config file was loaded or sources were given."""
        return self.config_file is not None or bool(self.sources)

    def enabled_targets(self) -> List[Target]:
        return [target for target in self.targets.values() if target.enabled]

    def get_source(self, name: str) -> Optional[Source]:
        for source in self.sources:
            if source.name == name:
                return source
        return None

    def validate(self) -> None:
        """
        Check for common misconfigurations.

        Raises:
            ConfigError: If the configuration cannot be used
        """
        if self.library_dir.exists() and not self.library_dir.is_dir():
            raise ConfigError(
                f"library_dir exists but is not a directory: {self.library_dir}"
            )

        seen = set()
        for source in self.sources:
            if not source.name:
                raise ConfigError("source name cannot be empty")
            if source.name in seen:
                raise ConfigError(f"duplicate source name: '{source.name}'")
            seen.add(source.name)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the config.yaml structure."""
        targets: Dict[str, Any] = {}
        for name, target in self.targets.items():
            target_data: Dict[str, Any] = {
                "enabled": target.enabled,
                "method": target.method.value,
            }
            if target.skills_dir is not None:
                target_data["skills_dir"] = str(target.skills_dir)
            if target.mcp_config is not None:
                target_data["mcp_config"] = str(target.mcp_config)
            targets[name] = target_data

        return {
            "library_dir": str(self.library_dir),
            "exclude": sorted(self.exclude),
            "sources": [
                {"name": s.name, "path": str(s.path), "type": s.kind.value}
                for s in self.sources
            ],
            "targets": targets,
        }


def _parse_source(source_data: Any, name: Optional[str] = None) -> Source:
    if not isinstance(source_data, dict):
        raise ConfigError(
            f"Invalid source definition: expected a dict, got {type(source_data).__name__}"
        )

    source_name = name if name is not None else source_data.get("name")
    if not source_name:
        raise ConfigError("source name cannot be empty")
    if "path" not in source_data:
        raise ConfigError(f"source '{source_name}' is missing required field: path")

    try:
        kind = SourceKind(source_data.get("type", SourceKind.DIRECTORY.value))
    except ValueError:
        valid = ", ".join(k.value for k in SourceKind)
        raise ConfigError(
            f"source '{source_name}' has unknown type '{source_data.get('type')}' "
            f"(expected one of: {valid})"
        ) from None

    return Source(
        name=str(source_name),
        path=expand_tilde(Path(source_data["path"])),
        kind=kind,
    )


def _parse_sources(data: Any) -> List[Source]:
    """
    Parse the sources section of config.yaml.

    Supports two formats, both keeping the order sources are written in:
    1. List format:
       sources:
         - name: standalone
           path: ~/.claude/skills
           type: directory

    2. Dict of dicts format (name as key):
       sources:
         standalone:
           path: ~/.claude/skills
           type: directory
    """
    if data is None:
        return []

    if isinstance(data, list):
        return [_parse_source(source_data) for source_data in data]

    if isinstance(data, dict):
        return [
            _parse_source(source_data, name=str(name))
            for name, source_data in data.items()
        ]

    raise ConfigError(
        f"Invalid format in 'sources' section: "
        f"expected list or dict, got {type(data).__name__}"
    )


def _optional_path(value: Any) -> Optional[Path]:
    if value is None:
        return None
    return expand_tilde(Path(value))


def _parse_target(name: str, target_data: Any) -> Target:
    if not isinstance(target_data, dict):
        raise ConfigError(
            f"Invalid target definition for '{name}': "
            f"expected a dict, got {type(target_data).__name__}"
        )

    try:
        method = TargetMethod(target_data.get("method", TargetMethod.SYMLINK.value))
    except ValueError:
        valid = ", ".join(m.value for m in TargetMethod)
        raise ConfigError(
            f"target '{name}' has unknown method '{target_data.get('method')}' "
            f"(expected one of: {valid})"
        ) from None

    try:
        return Target(
            name=name,
            method=method,
            enabled=bool(target_data.get("enabled", True)),
            skills_dir=_optional_path(target_data.get("skills_dir")),
            mcp_config=_optional_path(target_data.get("mcp_config")),
        )
    except ValueError as e:
        raise ConfigError(str(e)) from e


def _parse_targets(data: Any) -> Dict[str, Target]:
    """
    Parse the targets section of config.yaml.

    Targets are keyed by name (dict of dicts), or given as a list of dicts
    each carrying a ``name``.
    """
    if data is None:
        return {}

    targets: Dict[str, Target] = {}

    if isinstance(data, dict):
        for name, target_data in data.items():
            targets[str(name)] = _parse_target(str(name), target_data)
    elif isinstance(data, list):
        for target_data in data:
            name = target_data.get("name") if isinstance(target_data, dict) else None
            if not name:
                raise ConfigError("target name cannot be empty")
            if name in targets:
                raise ConfigError(f"duplicate target name: '{name}'")
            fields = {k: v for k, v in target_data.items() if k != "name"}
            targets[str(name)] = _parse_target(str(name), fields)
    else:
        raise ConfigError(
            f"Invalid format in 'targets' section: "
            f"expected list or dict, got {type(data).__name__}"
        )

    return targets


def parse_config(data: Dict[str, Any], config_file: Optional[Path] = None) -> Config:
    """
    Build a Config from parsed YAML data.

    Raises:
        ConfigError: If any section is invalid
    """
    if not isinstance(data, dict):
        raise ConfigError(
            f"Invalid config: expected a mapping, got {type(data).__name__}"
        )

    exclude = data.get("exclude") or []
    if not isinstance(exclude, list):
        raise ConfigError(
            f"Invalid format in 'exclude' section: expected list, got {type(exclude).__name__}"
        )

    library_dir = data.get("library_dir")
    return Config(
        library_dir=expand_tilde(Path(library_dir)) if library_dir else default_library_dir(),
        exclude={str(name) for name in exclude},
        sources=_parse_sources(data.get("sources")),
        targets=_parse_targets(data.get("targets")),
        config_file=config_file,
    )


def load_config(path: Path) -> Config:
    """
    Load and parse config.yaml.

    Args:
        path: Path to config.yaml

    Returns:
        Parsed Config, or defaults if the file does not exist

    Raises:
        ConfigError: If the file cannot be read or is invalid
    """
    if not path.exists():
        return Config()

    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigError(f"failed to read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"failed to parse {path}: {e}") from e

    return parse_config(data, config_file=path)


def load_config_or_default(path: Optional[Path] = None) -> Config:
    """
    Load from an explicit path or the default location.

    An explicit path whose parent directory does not exist is treated as a
    typo; a missing file in an existing directory is a first run.

    Raises:
        ConfigError: If the explicit path cannot exist or the file is invalid
    """
    if path is None:
        return load_config(default_config_path())

    path = expand_tilde(path)
    if not path.exists() and not path.parent.exists():
        raise ConfigError(f"config file not found: {path}")
    return load_config(path)


def save_config(config: Config, path: Path) -> None:
    """
    Save config to config.yaml, creating parent directories as needed.

    Args:
        config: Configuration to write
        path: Destination file
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w') as f:
        yaml.safe_dump(
            config.to_dict(),
            f,
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True
        )
