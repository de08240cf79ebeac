"""
Settings and credential storage for the timber marketplace.

Plain settings live in app_config.json. Secrets such as the Gemini API key
are kept Fernet-encrypted in credentials.enc, with the key in .key next to it.
"""

import copy
import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

from cryptography.fernet import Fernet
from pydantic import BaseModel, Field

CONFIG_DIR_ENV = "TIMBER_MARKET_CONFIG_DIR"
GEMINI_API_KEY_CREDENTIAL = "gemini_api_key"

LANGUAGES = {"en": "English", "hu": "Hungarian"}

DEFAULT_CONFIG: Dict[str, Any] = {
    "app_version": "0.1.0",
    "database": {"path": "data/timber_market.db"},
    "market": {
        "locale": "en",
        "top_n": 5,
        "max_items_per_prompt": 30,
        "notes_excerpt_length": 100,
        "raw_response_excerpt_length": 150,
    },
    "logging": {
        "level": "INFO",
        "log_dir": "logs",
        "max_file_size_mb": 10,
        "backup_count": 5,
    },
    "llm": {
        "provider": "gemini",
        "gemini": {
            "model": "gemini-2.5-flash",
            "temperature": 0.4,
            "api_key_env": "GOOGLE_API_KEY",
        },
    },
}


class MarketSettings(BaseModel):
    """Typed view of the "market" section."""

    locale: str = "en"
    top_n: int = Field(default=5, ge=1)
    max_items_per_prompt: int = Field(default=30, ge=1)
    notes_excerpt_length: int = Field(default=100, ge=0)
    raw_response_excerpt_length: int = Field(default=150, ge=0)

    @property
    def language(self) -> str:
        """Language name the AI assistant is asked to answer in."""
        return LANGUAGES.get(self.locale, "English")


class ConfigManager:
    """
    Dot-path access to application settings plus an encrypted credential store.

    Missing sections in a stored app_config.json are filled in from
    DEFAULT_CONFIG, so older files keep working after new settings appear.
    """

    def __init__(self, config_dir: Optional[str] = None) -> None:
        """
        Args:
            config_dir: Directory for configuration files. Falls back to the
                TIMBER_MARKET_CONFIG_DIR environment variable, then "config".
        """
        self.config_dir = Path(config_dir or os.getenv(CONFIG_DIR_ENV, "config"))
        self.config_dir.mkdir(parents=True, exist_ok=True)

        self.config_file = self.config_dir / "app_config.json"
        self.credentials_file = self.config_dir / "credentials.enc"
        self.key_file = self.config_dir / ".key"

        self.cipher = Fernet(self._load_or_create_key())
        self.config: Dict[str, Any] = {}
        self.credentials: Dict[str, str] = {}
        self.load_config()

    def _load_or_create_key(self) -> bytes:
        if self.key_file.exists():
            return self.key_file.read_bytes()
        key = Fernet.generate_key()
        _write_private(self.key_file, key)
        return key

    def load_config(self) -> None:
        """Read settings and credentials from disk."""
        if self.config_file.exists():
            stored = json.loads(self.config_file.read_text(encoding="utf-8"))
            self.config = _merge_defaults(DEFAULT_CONFIG, stored)
        else:
            self.config = copy.deepcopy(DEFAULT_CONFIG)
            self.save_config()

        if self.credentials_file.exists():
            token = self.credentials_file.read_bytes()
            self.credentials = json.loads(self.cipher.decrypt(token).decode())
        else:
            self.credentials = {}

    def save_config(self) -> None:
        self.config_file.write_text(json.dumps(self.config, indent=2), encoding="utf-8")

    def save_credentials(self) -> None:
        token = self.cipher.encrypt(json.dumps(self.credentials).encode())
        _write_private(self.credentials_file, token)

    def get(self, key: str, default: Any = None) -> Any:
        """
        Look up a setting by dot path, e.g. "market.top_n".

        Returns default when any part of the path is missing.
        """
        node: Any = self.config
        for part in key.split("."):
            if not isinstance(node, dict) or node.get(part) is None:
                return default
            node = node[part]
        return node

    def set(self, key: str, value: Any, save: bool = True) -> None:
        """Set a setting by dot path, creating intermediate sections."""
        *parents, leaf = key.split(".")
        node = self.config
        for part in parents:
            node = node.setdefault(part, {})
        node[leaf] = value

        if save:
            self.save_config()

    def reset_to_defaults(self) -> None:
        self.config = copy.deepcopy(DEFAULT_CONFIG)
        self.save_config()

    def market_settings(self) -> MarketSettings:
        """The "market" section validated into MarketSettings."""
        return MarketSettings.model_validate(self.get("market", {}))

    def prompt_language(self) -> str:
        return self.market_settings().language

    # Credentials

    def get_credential(self, key: str) -> Optional[str]:
        return self.credentials.get(key)

    def set_credential(self, key: str, value: str, save: bool = True) -> None:
        self.credentials[key] = value
        if save:
            self.save_credentials()

    def remove_credential(self, key: str, save: bool = True) -> bool:
        """
        Returns:
            True if the credential was stored and has been removed
        """
        if self.credentials.pop(key, None) is None:
            return False
        if save:
            self.save_credentials()
        return True

    def get_gemini_api_key(self) -> Optional[str]:
        """
        The Gemini API key.

        The encrypted credential wins; otherwise the environment variable named
        by llm.gemini.api_key_env is read.
        """
        stored = self.get_credential(GEMINI_API_KEY_CREDENTIAL)
        if stored:
            return stored
        return os.getenv(self.get("llm.gemini.api_key_env", "GOOGLE_API_KEY"))

    def set_gemini_api_key(self, api_key: str) -> None:
        self.set_credential(GEMINI_API_KEY_CREDENTIAL, api_key)


def _write_private(path: Path, data: bytes) -> None:
    path.write_bytes(data)
    if os.name != "nt":
        os.chmod(path, 0o600)


def _merge_defaults(defaults: Dict[str, Any], stored: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(defaults)
    for key, value in stored.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge_defaults(merged[key], value)
        else:
            merged[key] = value
    return merged


_config_manager: Optional[ConfigManager] = None


def get_config_manager() -> ConfigManager:
    """Process-wide ConfigManager, created on first use."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def reset_config_manager() -> None:
    """Forget the process-wide ConfigManager (used by tests)."""
    global _config_manager
    _config_manager = None
