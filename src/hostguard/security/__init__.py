"""Security module for hostguard."""

from hostguard.security.policy import (
    DEFAULT_DANGER_PATTERNS,
    CommandSafetyGuard,
    DangerPattern,
    Violation,
)

__all__ = ["DEFAULT_DANGER_PATTERNS", "CommandSafetyGuard", "DangerPattern", "Violation"]
