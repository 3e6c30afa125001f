"""
Constants and configuration defaults for termshell.
"""
from pathlib import Path
from typing import Final

APP_NAME: Final[str] = "termshell"
APP_VERSION: Final[str] = "1.0.0"
APP_DESCRIPTION: Final[str] = "An embeddable shell-like command interpreter"

CONFIG_DIR: Final[Path] = Path.home() / ".termshell"
CONFIG_FILE: Final[Path] = CONFIG_DIR / "config.json"
STATE_DB: Final[Path] = CONFIG_DIR / "state.db"
WORKSPACE_DIR: Final[Path] = CONFIG_DIR / "files"

DEFAULT_LOG_LEVEL: Final[str] = "WARNING"
DEFAULT_PROMPT: Final[str] = "~$ "

# Version reported by `<command> --version` when a processor declares none
DEFAULT_PROCESSOR_VERSION: Final[str] = "1.0.0"

# Key prefix used when a state bucket is written to the key-value store
STATE_STORAGE_PREFIX: Final[str] = "store-state-"
SHARED_STATE_STORE: Final[str] = "shared"

# Service tokens
KEY_VALUE_STORE_SERVICE: Final[str] = "key-value-store"
FILE_SYSTEM_SERVICE: Final[str] = "file-system"
REGISTRY_SERVICE: Final[str] = "processor-registry"

# Upper bound on alias -> alias substitutions for a single segment
MAX_ALIAS_DEPTH: Final[int] = 10

OPERATOR_AND: Final[str] = "&&"
OPERATOR_OR: Final[str] = "||"
OPERATOR_PIPE: Final[str] = "|"
OPERATOR_APPEND: Final[str] = ">>"
