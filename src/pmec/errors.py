"""
Domain-specific exceptions for PMEC.
All exceptions are explicit and carry meaningful context.
"""


class PMECError(Exception):
    """Base exception for all PMEC errors."""
    pass


class ModelError(PMECError):
    """Base exception for model-related errors."""
    pass


class MissingRequiredSectionsError(ModelError):
    """Raised when a loaded model lacks one or more required sections."""

    def __init__(self, missing):
        self.missing = list(missing)
        super().__init__("missing required sections: " + ",".join(self.missing))


class PolicyArityError(ModelError):
    """Raised when a rule has fewer fields than its definition requires."""
    pass


class ConfigError(PMECError):
    """Base exception for configuration errors."""
    pass


class ConfigFileNotFoundError(ConfigError):
    """Raised when a CONF file cannot be found."""
    pass


class ConfigParseError(ConfigError):
    """Raised when CONF text cannot be parsed."""
    pass


class InvariantViolationError(PMECError):
    """Raised when a core model invariant is violated."""
    pass
