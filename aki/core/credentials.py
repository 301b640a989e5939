"""API key resolution from ordered configuration sources."""

import os
import threading
from pathlib import Path
from typing import Dict, Iterable, Mapping, Optional, Tuple
from dotenv import dotenv_values

from ..models.enums import CredentialSource
from ..utils.config import Config
from ..utils.errors import ConfigurationError
from ..utils.logger import get_logger, key_prefix

logger = get_logger(__name__)


class CredentialResolver:
    """
    Resolves API keys by name, in strict priority order:

    1. process environment variable
    2. bundled application config (``credentials`` mapping in app.yaml)
    3. build-time dotenv file

    Each name is resolved once and memoized for the life of the resolver.
    """

    def __init__(
        self,
        bundled: Optional[Mapping[str, str]] = None,
        build_config_path: Optional[Path] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        self.bundled = dict(bundled or {})
        self.build_config_path = build_config_path
        self.environ = environ if environ is not None else os.environ
        self._resolved: Dict[str, str] = {}
        self._lock = threading.Lock()
        self._build_values: Optional[Dict[str, Optional[str]]] = None

    @classmethod
    def from_config(cls, config: Config) -> "CredentialResolver":
        return cls(
            bundled=config.credentials,
            build_config_path=config.build_config_path,
        )

    def resolve(self, name: str) -> str:
        """
        Return the credential for name.

        Raises:
            ConfigurationError: If no source holds a non-empty value
        """
        cached = self._resolved.get(name)
        if cached is not None:
            return cached

        with self._lock:
            if name in self._resolved:
                return self._resolved[name]

            value, source = self._lookup(name)
            if not value:
                logger.error(
                    f"{name} not found in any configuration source",
                    extra={
                        "credential": name,
                        "environment_keys": len(self.environ),
                        "bundled_keys": sorted(self.bundled),
                        "build_config_path": str(self.build_config_path),
                    }
                )
                raise ConfigurationError(f"{name} not found in any configuration source")

            logger.info(
                f"🔑 {name} loaded from {source.value}: {key_prefix(value)}",
                extra={"credential": name, "source": source.value}
            )
            self._resolved[name] = value
            return value

    def validate(self, names: Iterable[str]) -> Dict[str, str]:
        """
        Resolve every name up front.

        Raises:
            ConfigurationError: Listing all names that could not be resolved
        """
        resolved = {}
        missing = []
        for name in names:
            try:
                resolved[name] = self.resolve(name)
            except ConfigurationError:
                missing.append(name)

        if missing:
            raise ConfigurationError(f"Missing required credentials: {', '.join(missing)}")

        return resolved

    def is_resolved(self, name: str) -> bool:
        return name in self._resolved

    def _lookup(self, name: str) -> Tuple[Optional[str], Optional[CredentialSource]]:
        sources = (
            (CredentialSource.ENVIRONMENT, lambda: self.environ.get(name)),
            (CredentialSource.APP_CONFIG, lambda: self.bundled.get(name)),
            (CredentialSource.BUILD_CONFIG, lambda: self._build_config().get(name)),
        )
        # Later sources are only read when earlier ones miss
        for source, read in sources:
            value = read()
            if isinstance(value, str) and value.strip():
                return value, source
        return None, None

    def _build_config(self) -> Dict[str, Optional[str]]:
        if self._build_values is None:
            path = self.build_config_path
            if path is not None and Path(path).is_file():
                self._build_values = dotenv_values(path)
            else:
                self._build_values = {}
        return self._build_values
