"""
Exceptions raised by instafix.

UserError and its subclasses are caused by the request or the configuration
(a front end maps them to a client-fault response). RenderError means the
composition itself broke (font, resize, blur, target size).
"""

from __future__ import annotations


class InstafixError(Exception):
    """Base class for every error raised by instafix."""


class UserError(InstafixError, ValueError):
    """Invalid request parameters."""


class ConfigError(UserError):
    """Invalid configuration or an unresolvable reference inside it."""


class ProfileNotFoundError(UserError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"profile not found: {name}")


class DecodeError(UserError):
    """The input bytes do not decode to an image."""


class RenderError(InstafixError, RuntimeError):
    """Composition failed for reasons the caller cannot fix."""
