"""Exception types raised by the tome core."""


class TomeError(Exception):
    """Base class for all tome errors."""


class ConfigError(TomeError):
    """The configuration file is unreadable or invalid."""


class LinkError(TomeError):
    """A managed path could not be read or changed on disk."""


class TargetError(TomeError):
    """Distribution to a single target failed; other targets are unaffected."""

    def __init__(self, target_name: str, message: str):
        self.target_name = target_name
        self.message = message
        super().__init__(f"target '{target_name}': {message}")


class TargetConfigError(TargetError):
    """A target's own config document has an unexpected shape."""
