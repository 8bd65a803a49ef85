"""Configuration resolution with XDG paths and precedence rules.

This module turns CLI flags, environment variables, and the project-local
``jscsession.json`` into the explicit :class:`~jscsession.models.LoginConfig`
value a login attempt runs with:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.jscsession/`` on macOS and Windows. See :func:`get_data_dir`.
* **Project config** -- :func:`load_project_config` reads non-secret
  defaults (domain, username, password source, customer id).
* **Precedence resolution** -- :func:`resolve_login_config` merges CLI
  flags, environment variables, project config, and defaults.
* **Credential resolution** -- :func:`resolve_credential` reads secrets
  from env vars, files, or interactive prompts.

Resolved credentials are only ever returned to the caller. Nothing here
keeps them in module state.
"""

from __future__ import annotations

import getpass
import json
import os
import platform
import sys
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from jscsession.exceptions import ConfigError
from jscsession.models import DEFAULT_DOMAIN, LoginConfig, ProjectConfig

_APP_NAME = "jscsession"
_PROJECT_CONFIG_FILENAME = "jscsession.json"

ENV_DOMAIN = "JSC_DOMAIN"
ENV_USERNAME = "JSC_USERNAME"
ENV_PASSWORD_SOURCE = "JSC_PASSWORD_SOURCE"
ENV_PASSWORD = "JSC_PASSWORD"
ENV_CUSTOMER_ID = "JSC_CUSTOMER_ID"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/jscsession/`` (default
    ``~/.local/share/jscsession/``). On macOS/Windows: ``~/.jscsession/``.

    Returns:
        Absolute path to the data directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Project-local config ---


def load_project_config() -> Optional[ProjectConfig]:
    """Load project-local configuration from ``./jscsession.json``.

    Returns:
        The parsed :class:`~jscsession.models.ProjectConfig`, or ``None``
        if the file does not exist.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return ProjectConfig.model_validate(data)
    except (json.JSONDecodeError, ValidationError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc


# --- Precedence resolution ---


def _first(*values: Optional[str]) -> Optional[str]:
    """Return the first value that is neither ``None`` nor empty."""
    for value in values:
        if value:
            return value
    return None


def resolve_login_config(
    cli_domain: Optional[str] = None,
    cli_username: Optional[str] = None,
    cli_password_source: Optional[str] = None,
) -> LoginConfig:
    """Resolve the login configuration with full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_domain``, ``cli_username``, ``cli_password_source``)
        2. Environment variables (``JSC_DOMAIN``, ``JSC_USERNAME``,
           ``JSC_PASSWORD_SOURCE``)
        3. Project config (``./jscsession.json``)
        4. Defaults (domain ``radar.wandera.com``)

    When no password source is configured anywhere, a plain ``JSC_PASSWORD``
    environment variable is used.

    Returns:
        A :class:`~jscsession.models.LoginConfig` holding the resolved
        password.

    Raises:
        ConfigError: If no username or password can be resolved, or a
            credential source is invalid.
    """
    project = load_project_config() or ProjectConfig()

    domain = _first(cli_domain, os.environ.get(ENV_DOMAIN), project.domain) or DEFAULT_DOMAIN
    username = _first(cli_username, os.environ.get(ENV_USERNAME), project.username)
    if username is None:
        raise ConfigError(
            f"No username configured: pass --username, set {ENV_USERNAME}, "
            f"or add 'username' to {_PROJECT_CONFIG_FILENAME}"
        )

    password_source = _first(
        cli_password_source,
        os.environ.get(ENV_PASSWORD_SOURCE),
        project.password_source,
    )
    if password_source is not None:
        password = resolve_credential(password_source)
    else:
        password = os.environ.get(ENV_PASSWORD, "")
        if not password:
            raise ConfigError(
                f"Password must be provided either as an environment variable "
                f"({ENV_PASSWORD}) or through a password source "
                f"(--password-source, {ENV_PASSWORD_SOURCE})"
            )

    return LoginConfig(
        domain=domain,
        username=username,
        password=password,
        request=project.request,
    )


def resolve_customer_id(cli_customer_id: Optional[str] = None) -> Optional[str]:
    """Resolve the tenant customer id: CLI flag, then ``JSC_CUSTOMER_ID``, then project config."""
    project = load_project_config()
    return _first(
        cli_customer_id,
        os.environ.get(ENV_CUSTOMER_ID),
        project.customer_id if project else None,
    )


# --- Credential source resolution ---


def resolve_credential(source: str) -> str:
    """Resolve a credential from its source descriptor.

    Supported formats:
        - ``"env:VAR_NAME"`` -- reads ``os.environ["VAR_NAME"]``
        - ``"file:/path/to/file"`` -- reads file content, stripped of whitespace
        - ``"prompt"`` -- prompts user interactively (requires a TTY)

    Args:
        source: The source descriptor string.

    Returns:
        The resolved credential string.

    Raises:
        ConfigError: If the source can't be resolved.
    """
    if source.startswith("env:"):
        var_name = source[4:]
        value = os.environ.get(var_name)
        if value is None:
            raise ConfigError(
                f"Environment variable '{var_name}' is not set (source: {source})"
            )
        return value

    if source.startswith("file:"):
        path = Path(source[5:]).expanduser()
        if not path.is_file():
            raise ConfigError(f"Credential file not found: {path} (source: {source})")
        try:
            return path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise ConfigError(f"Cannot read credential file {path}: {exc}") from exc

    if source == "prompt":
        if not sys.stdin.isatty():
            raise ConfigError(
                "Cannot prompt for credentials: stdin is not a TTY (source: prompt)"
            )
        return getpass.getpass("JSC password: ")

    raise ConfigError(f"Unknown credential source format: {source}")
