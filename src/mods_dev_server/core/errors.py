class ConfigurationError(Exception):
    """Raised when the server cannot start with the given configuration."""


class ConfigurationWarning(UserWarning):
    """Issued for non-fatal configuration problems."""


class ManifestWarning(ConfigurationWarning):
    """Issued when the mod manifest is missing from the root directory."""
