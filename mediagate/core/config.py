"""
Configuration module for mediagate.

The super-agent email is not a plain Config field. It can change while
the process runs, so it is read through a SuperAgentSetting at the start
of every operation.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, fields
from typing import Any, Dict, Optional
import os
import threading

from ..util.config import ENV_PREFIX, get_int_config, get_config_value, load_config_file


SUDO_ENV_VAR = f"{ENV_PREFIX}SUDO"


class SuperAgentSetting(ABC):
    """Source of the single process-wide super-agent email"""

    @abstractmethod
    def current(self) -> Optional[str]:
        """Return the super-agent email, or None when no override is configured"""
        pass


class EnvSuperAgentSetting(SuperAgentSetting):
    """Reads the super-agent email from the environment on every call"""

    def __init__(self, variable: str = SUDO_ENV_VAR):
        self.variable = variable

    def current(self) -> Optional[str]:
        value = os.environ.get(self.variable, "").strip()
        return value or None


class StaticSuperAgentSetting(SuperAgentSetting):
    """In-process super-agent setting that the host can set and clear at runtime"""

    def __init__(self, email: Optional[str] = None):
        self._lock = threading.Lock()
        self._email = email or None

    def current(self) -> Optional[str]:
        with self._lock:
            return self._email

    def set(self, email: str) -> None:
        if not email or not email.strip():
            raise ValueError("super-agent email must not be empty")
        with self._lock:
            self._email = email.strip()

    def clear(self) -> None:
        with self._lock:
            self._email = None


@dataclass
class Config:
    """Limits and locations used by the mediagate core and its collaborators"""
    page_size: int = 30
    max_note_length: int = 500
    max_name_length: int = 128
    max_transcription_length: int = 1000000
    upload_root: str = "uploads"
    audit_log_path: Optional[str] = None

    @classmethod
    def from_env(cls) -> "Config":
        """Create configuration from environment variables"""
        return cls(
            page_size=get_int_config("PAGE_SIZE", 30),
            max_note_length=get_int_config("MAX_NOTE_LENGTH", 500),
            max_name_length=get_int_config("MAX_NAME_LENGTH", 128),
            max_transcription_length=get_int_config("MAX_TRANSCRIPTION_LENGTH", 1000000),
            upload_root=get_config_value("UPLOAD_ROOT", "uploads"),
            audit_log_path=get_config_value("AUDIT_LOG"),
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown configuration keys: {sorted(unknown)}")
        return cls(**data)

    @classmethod
    def from_file(cls, file_path: str) -> "Config":
        """Create configuration from a JSON or YAML file"""
        return cls.from_dict(load_config_file(file_path))

    def validate(self) -> bool:
        """Validate the configuration"""
        if self.page_size <= 0:
            raise ValueError("page_size must be positive")
        if self.max_note_length <= 0:
            raise ValueError("max_note_length must be positive")
        if self.max_name_length <= 0:
            raise ValueError("max_name_length must be positive")
        if self.max_transcription_length <= 0:
            raise ValueError("max_transcription_length must be positive")
        if not self.upload_root:
            raise ValueError("upload_root is required")
        return True
