"""Enumerations for the image studio."""

from enum import Enum


class CredentialSource(str, Enum):
    """Where a credential was found."""
    ENVIRONMENT = "environment"
    APP_CONFIG = "app_config"
    BUILD_CONFIG = "build_config"


class SessionState(str, Enum):
    """Busy state of a caller-owned session."""
    IDLE = "idle"
    IN_FLIGHT = "in_flight"


class Operation(str, Enum):
    """Operations exposed by the studio."""
    ENHANCE = "enhance"
    SYNTHESIZE = "synthesize"
