from __future__ import annotations


class SiteError(Exception):
    """Base class for every error raised by the build pipeline."""


class ConfigError(SiteError):
    pass


class ParseError(SiteError):
    """A content document could not be turned into a Document."""

    def __init__(self, message: str, path: str = "") -> None:
        super().__init__(f"{path}: {message}" if path else message)
        self.path = path
        self.reason = message


class TemplateError(SiteError):
    pass


class CollisionError(SiteError):
    def __init__(self, output: str, first: str, second: str) -> None:
        super().__init__(f"{first} and {second} both map to {output}")
        self.output = output
        self.first = first
        self.second = second
