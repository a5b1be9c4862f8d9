"""Capabilities model: one canonical value, legacy and W3C wire shapes."""

from .browsers import BrowserOptions, ChromeOptions, FirefoxOptions
from .registry import (
    BrowserBuilder,
    BrowserRegistry,
    FirefoxBuilder,
    MigrationRule,
    build_default_registry,
    default_registry,
    register_browser,
)
from .model import Capabilities, merge, W3C_STANDARD_CAPABILITIES

__all__ = [
    "BrowserOptions",
    "ChromeOptions",
    "FirefoxOptions",
    "BrowserBuilder",
    "BrowserRegistry",
    "FirefoxBuilder",
    "MigrationRule",
    "build_default_registry",
    "default_registry",
    "register_browser",
    "Capabilities",
    "merge",
    "W3C_STANDARD_CAPABILITIES",
]
