"""Project configuration for Glide.

Manages the per-project .glide/ directory with config.toml, .gitignore,
and the project-scoped flow database. Provides discovery via
find_project_root() and CLI integration via resolve_db_for_cli().
"""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from .breakdown.config import BreakdownConfig

logger = logging.getLogger(__name__)

_GLIDE_DIR = ".glide"
_CONFIG_FILE = "config.toml"
_DB_FILE = "flows.db"

_GITIGNORE_CONTENT = """\
flows.db
*.db-journal
*.db-wal
*.db-shm
"""

LLM_PROVIDERS = ("claude", "mock")


@dataclass(frozen=True)
class LLMConfig:
    """LLM client configuration."""

    provider: str = "claude"
    max_turns: int = 1


@dataclass(frozen=True)
class ProjectConfig:
    """Per-project Glide configuration.

    Loaded from .glide/config.toml via load_project_config().
    """

    name: str
    llm: LLMConfig = field(default_factory=LLMConfig)
    breakdown: BreakdownConfig = field(default_factory=BreakdownConfig)

    def resolve_db_path(self, project_root: Path) -> Path:
        """Resolve absolute path to the project database."""
        return project_root.resolve() / _GLIDE_DIR / _DB_FILE


def load_project_config(project_path: Path) -> ProjectConfig:
    """Load config from .glide/config.toml.

    Args:
        project_path: Path to the project root directory.

    Returns:
        Parsed ProjectConfig.

    Raises:
        FileNotFoundError: If .glide/config.toml is missing.
        ValueError: On invalid, empty, or corrupt TOML.
    """
    config_file = project_path / _GLIDE_DIR / _CONFIG_FILE
    if not config_file.exists():
        msg = f"Project config not found: {config_file}"
        raise FileNotFoundError(msg)

    content = config_file.read_text(encoding="utf-8")
    if not content.strip():
        msg = f"Config file is empty: {config_file}"
        raise ValueError(msg)

    try:
        data = tomllib.loads(content)
    except tomllib.TOMLDecodeError as exc:
        msg = f"Invalid TOML in {config_file}: {exc}"
        raise ValueError(msg) from exc

    return _parse_config(data)


def _parse_config(data: dict[str, object]) -> ProjectConfig:
    """Parse raw TOML data into a ProjectConfig.

    Unknown fields are silently ignored for forward compatibility.
    """
    project = data.get("project", {})
    if not isinstance(project, dict):
        msg = "[project] section must be a table"
        raise ValueError(msg)

    llm_data = data.get("llm", {})
    if not isinstance(llm_data, dict):
        msg = "[llm] section must be a table"
        raise ValueError(msg)

    breakdown_data = data.get("breakdown", {})
    if not isinstance(breakdown_data, dict):
        msg = "[breakdown] section must be a table"
        raise ValueError(msg)

    name = project.get("name")
    if not isinstance(name, str) or not name:
        msg = "project.name is required and must be a non-empty string"
        raise ValueError(msg)

    defaults = BreakdownConfig()
    config = ProjectConfig(
        name=name,
        llm=LLMConfig(
            provider=str(llm_data.get("provider", "claude")),
            max_turns=int(llm_data.get("max_turns", 1)),
        ),
        breakdown=BreakdownConfig(
            default_title=str(breakdown_data.get("default_title", defaults.default_title)),
            default_completion_cue=str(
                breakdown_data.get("default_completion_cue", defaults.default_completion_cue)
            ),
            default_description=str(
                breakdown_data.get("default_description", defaults.default_description)
            ),
            stream=bool(breakdown_data.get("stream", defaults.stream)),
        ),
    )
    _validate_config(config)
    return config


def create_default_config(
    project_path: Path,
    *,
    name: str | None = None,
    force: bool = False,
) -> ProjectConfig:
    """Create .glide/ directory with config.toml and .gitignore.

    Args:
        project_path: Path to the project root directory.
        name: Project name. Defaults to directory basename.
        force: Overwrite existing .glide/ configuration.

    Returns:
        The created ProjectConfig.

    Raises:
        FileExistsError: If .glide/ exists and force=False.
    """
    glide_dir = project_path / _GLIDE_DIR
    if glide_dir.exists() and not force:
        msg = f"Project already initialized: {glide_dir}"
        raise FileExistsError(msg)

    resolved_name = name or project_path.resolve().name

    config = ProjectConfig(name=resolved_name)
    _validate_config(config)

    glide_dir.mkdir(parents=True, exist_ok=True)

    config_file = glide_dir / _CONFIG_FILE
    config_file.write_text(_generate_toml(config), encoding="utf-8")

    gitignore_file = glide_dir / ".gitignore"
    gitignore_file.write_text(_GITIGNORE_CONTENT, encoding="utf-8")

    logger.info("Initialized project '%s' at %s", resolved_name, glide_dir)
    return config


def find_project_root(start: Path | None = None) -> Path | None:
    """Walk up from start to find nearest .glide/ directory.

    Args:
        start: Starting directory. Defaults to cwd.

    Returns:
        The directory containing .glide/, or None if not found.
    """
    current = (start or Path.cwd()).resolve()
    while True:
        if (current / _GLIDE_DIR).is_dir():
            return current
        parent = current.parent
        if parent == current:
            return None
        current = parent


def resolve_db_for_cli(db_override: str | None = None) -> tuple[Path, ProjectConfig | None]:
    """Resolve database path for CLI commands with auto-discovery fallback.

    Args:
        db_override: Explicit --db path. If given, skips discovery.

    Returns:
        (db_path, config). config is None when db_override is used.

    Raises:
        FileNotFoundError: If no db_override and no .glide/ found.
        ValueError: If .glide/config.toml is corrupt or invalid.
    """
    if db_override is not None:
        return Path(db_override), None

    project_root = find_project_root()
    if project_root is None:
        msg = "No .glide/ directory found. Run 'glide init' first or use --db."
        raise FileNotFoundError(msg)

    config = load_project_config(project_root)
    db_path = config.resolve_db_path(project_root)
    return db_path, config


def _generate_toml(config: ProjectConfig) -> str:
    """Generate TOML string from a ProjectConfig.

    Handles Python→TOML type mapping: booleans as true/false,
    integers unquoted, strings quoted.
    """
    breakdown = config.breakdown
    lines = [
        "[project]",
        f'name = "{_escape_toml_string(config.name)}"',
        "",
        "[llm]",
        f'provider = "{_escape_toml_string(config.llm.provider)}"',
        f"max_turns = {config.llm.max_turns}",
        "",
        "[breakdown]",
        f'default_title = "{_escape_toml_string(breakdown.default_title)}"',
        f'default_completion_cue = "{_escape_toml_string(breakdown.default_completion_cue)}"',
        f'default_description = "{_escape_toml_string(breakdown.default_description)}"',
        f"stream = {'true' if breakdown.stream else 'false'}",
        "",
    ]
    return "\n".join(lines)


def _escape_toml_string(value: str) -> str:
    """Escape special characters for TOML string values."""
    return value.replace("\\", "\\\\").replace('"', '\\"')


def _validate_config(config: ProjectConfig) -> None:
    """Validate config values.

    Raises:
        ValueError: On invalid configuration.
    """
    if not config.name or not config.name.strip():
        msg = "project.name must not be empty"
        raise ValueError(msg)
    if " " in config.name or "\t" in config.name:
        msg = f"project.name must not contain whitespace: '{config.name}'"
        raise ValueError(msg)

    if config.llm.provider not in LLM_PROVIDERS:
        msg = f"llm.provider must be one of {LLM_PROVIDERS}, got '{config.llm.provider}'"
        raise ValueError(msg)
    if config.llm.max_turns < 1 or config.llm.max_turns > 10:
        msg = f"llm.max_turns must be 1-10, got {config.llm.max_turns}"
        raise ValueError(msg)

    if not config.breakdown.default_title.strip():
        msg = "breakdown.default_title must not be empty"
        raise ValueError(msg)
