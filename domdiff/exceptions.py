"""Custom exceptions for the domdiff engine."""


class DomDiffError(Exception):
    """Base exception for domdiff errors."""
    pass


class InvalidArgumentError(DomDiffError):
    """Raised when a required argument is missing or has an unsupported type."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class EngineStateError(DomDiffError):
    """Raised when the engine is reconfigured or re-entered while running."""
    def __init__(self, operation: str):
        super().__init__(f"Cannot {operation} while a comparison is running")
        self.operation = operation


class ConfigError(DomDiffError):
    """Raised when an engine configuration is invalid."""
    def __init__(self, key: str, message: str):
        super().__init__(f"Invalid config '{key}': {message}")
        self.key = key
        self.message = message


class ScenarioError(DomDiffError):
    """Raised when a scenario file cannot be loaded."""
    def __init__(self, path: str, reason: str):
        super().__init__(f"Cannot load scenario {path}: {reason}")
        self.path = path
        self.reason = reason
