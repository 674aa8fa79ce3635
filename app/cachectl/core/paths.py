"""Where cachectl keeps its own files.

Everything follows the XDG base directories, with a ``cachectl``
subdirectory in each:

    config       $XDG_CONFIG_HOME  (~/.config)       config.toml, theme.toml
    state        $XDG_STATE_HOME   (~/.local/state)  history.jsonl, quarantine/
    cache        $XDG_CACHE_HOME   (~/.cache)        central/ buckets
    data         $XDG_DATA_HOME    (~/.local/share)  bin/ wrappers

Lock markers are the exception: they sit in the system temp directory so
that all processes of a user agree on them.
"""

import os
import tempfile
from pathlib import Path

APP_NAME = "cachectl"

_XDG_DEFAULTS = {
    "XDG_CONFIG_HOME": ".config",
    "XDG_STATE_HOME": ".local/state",
    "XDG_CACHE_HOME": ".cache",
    "XDG_DATA_HOME": ".local/share",
}


def _xdg_app_dir(env_var: str) -> Path:
    base = os.environ.get(env_var)
    root = Path(base) if base else Path.home() / _XDG_DEFAULTS[env_var]
    return root / APP_NAME


def get_config_dir() -> Path:
    return _xdg_app_dir("XDG_CONFIG_HOME")


def get_state_dir() -> Path:
    """Directory for data that must survive between runs (history, quarantine)."""
    return _xdg_app_dir("XDG_STATE_HOME")


def get_config_path() -> Path:
    return get_config_dir() / "config.toml"


def get_default_central_root() -> Path:
    """Base directory holding one bucket per project."""
    return _xdg_app_dir("XDG_CACHE_HOME") / "central"


def get_default_quarantine_root() -> Path:
    """Quarantined content is never removed by cachectl, so it is state, not cache."""
    return get_state_dir() / "quarantine"


def get_default_bin_dir() -> Path:
    return _xdg_app_dir("XDG_DATA_HOME") / "bin"


def get_lock_dir() -> Path:
    return Path(tempfile.gettempdir()) / f"{APP_NAME}-locks"


def ensure_dir(path: Path, purpose: str) -> Path:
    """Create ``path`` with parents.

    Raises:
        RuntimeError: The directory cannot be created. The message names
            ``purpose`` so CLI errors say which directory was at fault.
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except PermissionError as e:
        msg = f"Cannot create {purpose} directory {path}: Permission denied"
        raise RuntimeError(msg) from e
    except OSError as e:
        msg = f"Cannot create {purpose} directory {path}: {e}"
        raise RuntimeError(msg) from e
    return path


def ensure_lock_dir(lock_dir: Path | None = None) -> Path:
    """Create the lock marker directory, or ``lock_dir`` when given."""
    return ensure_dir(lock_dir or get_lock_dir(), "lock")
