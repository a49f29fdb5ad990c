"""
apigen Configuration Management

Handles loading, validation, and default generation for apigen.config.json.
"""

import json
from pathlib import Path
from dataclasses import dataclass, field
from typing import Dict, Any, Optional

from apigen.core.constants import CONFIG_FILE_NAME, HttpClientRuntime


__version__ = "0.3.0"

def get_version() -> str:
    return __version__


@dataclass
class OutputConfig:
    """Output configuration for the generated module."""
    path: str = "src/api/client.gen.ts"


@dataclass
class HttpClientConfig:
    """HTTP client the generated classes instantiate."""
    className: str = HttpClientRuntime.CLASS_NAME
    importPath: str = HttpClientRuntime.IMPORT_PATH


@dataclass
class ApigenConfig:
    """Complete apigen configuration."""
    version: str = "v0"
    basePath: str = "/api"
    indent: int = 4
    output: OutputConfig = field(default_factory=OutputConfig)
    httpClient: HttpClientConfig = field(default_factory=HttpClientConfig)

    def get_output_location(self, project_root: str) -> str:
        """Get absolute path for the generated module."""
        return str(Path(project_root) / self.output.path)


def load_apigen_config(project_root: Optional[str] = None) -> ApigenConfig:
    """
    Load apigen configuration from apigen.config.json or create default.

    Args:
        project_root: Project root directory (defaults to current directory)

    Returns:
        ApigenConfig object with loaded or default configuration
    """
    if project_root is None:
        project_root = str(Path.cwd())

    config_path = Path(project_root) / CONFIG_FILE_NAME

    if config_path.exists():
        return _load_config_from_file(config_path)
    else:
        return _create_default_config(config_path)


def _load_config_from_file(config_path: Path) -> ApigenConfig:
    """Load configuration from existing file."""
    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            config_data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {config_path}: {e}")
    except OSError as e:
        raise ValueError(f"Failed to load config from {config_path}: {e}")

    try:
        return _validate_and_convert_config(config_data)
    except ValueError as e:
        raise ValueError(f"Invalid config in {config_path}: {e}")


def _create_default_config(config_path: Path) -> ApigenConfig:
    """Create default configuration and save it to file."""
    default_config = ApigenConfig()
    _save_config_to_file(default_config, config_path)

    print(f"Created default apigen config at {config_path}")
    return default_config


def _validate_and_convert_config(config_data: Dict[str, Any]) -> ApigenConfig:
    """Validate and convert raw config data to ApigenConfig object."""
    if not isinstance(config_data, dict):
        raise ValueError("top-level value must be an object")

    output_data = _section(config_data, "output")
    output_config = OutputConfig(
        path=_string(output_data, "path", OutputConfig.path, "output.path")
    )
    if not output_config.path.endswith(".ts"):
        raise ValueError(f"Output path must be a .ts file: {output_config.path}")

    client_data = _section(config_data, "httpClient")
    client_config = HttpClientConfig(
        className=_string(client_data, "className", HttpClientRuntime.CLASS_NAME, "httpClient.className"),
        importPath=_string(client_data, "importPath", HttpClientRuntime.IMPORT_PATH, "httpClient.importPath")
    )
    if not client_config.className.isidentifier():
        raise ValueError(f"Invalid HTTP client class name: {client_config.className}")

    indent = config_data.get("indent", 4)
    if not isinstance(indent, int) or isinstance(indent, bool) or indent < 1:
        raise ValueError(f"Invalid indent: {indent}")

    return ApigenConfig(
        version=_string(config_data, "version", "v0", "version"),
        basePath=_string(config_data, "basePath", "/api", "basePath"),
        indent=indent,
        output=output_config,
        httpClient=client_config,
    )


def _section(config_data: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = config_data.get(key, {})
    if not isinstance(value, dict):
        raise ValueError(f"'{key}' must be an object")
    return value


def _string(data: Dict[str, Any], key: str, default: str, label: str) -> str:
    value = data.get(key, default)
    if not isinstance(value, str):
        raise ValueError(f"'{label}' must be a string, got {value!r}")
    return value


def _save_config_to_file(config: ApigenConfig, config_path: Path):
    """Save configuration to JSON file."""
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, 'w', encoding='utf-8') as f:
        json.dump(_config_to_dict(config), f, indent=2, ensure_ascii=False)


def _config_to_dict(config: ApigenConfig) -> Dict[str, Any]:
    """Convert ApigenConfig to dictionary for JSON serialization."""
    return {
        "version": config.version,
        "basePath": config.basePath,
        "indent": config.indent,
        "output": {
            "path": config.output.path
        },
        "httpClient": {
            "className": config.httpClient.className,
            "importPath": config.httpClient.importPath
        }
    }
