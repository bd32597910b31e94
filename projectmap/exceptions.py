"""Project map exception classes"""


class ProjectMapError(Exception):
    """Base exception for project map operations"""
    pass


class ConfigError(ProjectMapError):
    """Raised when configuration values are invalid"""
    pass


class AuthError(ProjectMapError):
    """Raised when a webhook signature is missing or does not match"""
    pass


class PayloadParseError(ProjectMapError):
    """Raised when a webhook body is not valid JSON"""
    pass


class StorageError(ProjectMapError):
    """Raised when the record store cannot be reached or fails a command"""
    pass
