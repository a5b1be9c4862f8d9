"""Browser capability registry and legacy -> W3C migration rules."""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Type, Union

from ..errors import ConfigurationError
from .browsers import BrowserOptions, ChromeOptions, FirefoxOptions

import logging
logger = logging.getLogger(__name__)


class BrowserBuilder:
    """
    Knows how to hold and render one browser family's options.

    Args:
        options_type: BrowserOptions subclass used as the in-memory value.
        legacy_aliases: Extra keys the options are also emitted under in the
            legacy payload (older drivers read e.g. ``chromeOptions``).
    """

    def __init__(self, options_type: Type[BrowserOptions], legacy_aliases: Iterable[str] = ()):
        self.options_type = options_type
        self.legacy_aliases = tuple(legacy_aliases)

    def new_options(self) -> BrowserOptions:
        return self.options_type()

    def parse(self, key: str, value: Any) -> BrowserOptions:
        """Coerce a caller-supplied value into this builder's options type (always a copy)."""
        if isinstance(value, self.options_type):
            return value.copy()
        if isinstance(value, Mapping):
            return self.options_type.from_mapping(value)
        raise ConfigurationError(
            f"capability {key!r} expects a mapping or {self.options_type.__name__}, got {type(value).__name__}"
        )

    def render_legacy(self, key: str, options: BrowserOptions) -> Dict[str, Any]:
        rendered = options.to_dict()
        out = {key: rendered}
        for alias in self.legacy_aliases:
            out[alias] = options.to_dict()
        return out

    def render_w3c(self, key: str, options: BrowserOptions) -> Dict[str, Any]:
        return {key: options.to_dict()}


class FirefoxBuilder(BrowserBuilder):
    """Selenium 2 era servers read the profile from the flat ``firefox_profile`` key."""

    def __init__(self):
        super().__init__(FirefoxOptions)

    def render_legacy(self, key: str, options: BrowserOptions) -> Dict[str, Any]:
        out = super().render_legacy(key, options)
        if getattr(options, "profile", None):
            out["firefox_profile"] = options.profile
        return out


@dataclass(frozen=True)
class MigrationRule:
    """
    Moves a deprecated flat capability into a browser's nested options.

    ``field`` names the attribute on the target options object; None means the
    whole value is an options mapping merged into the target.
    """

    source: str
    target: str
    field: Optional[str] = None
    expected_type: Union[type, Tuple[type, ...]] = str


class BrowserRegistry:
    def __init__(self):
        self._builders: Dict[str, BrowserBuilder] = {}
        self._migrations: List[MigrationRule] = []

    def register(self, key: str, builder: BrowserBuilder) -> None:
        if not key:
            raise ConfigurationError("browser capability key must not be empty")
        if key in self._builders:
            logger.debug(f"Replacing browser builder for {key!r}")
        self._builders[key] = builder

    def register_migration(self, rule: MigrationRule) -> None:
        self._migrations = [r for r in self._migrations if r.source != rule.source]
        self._migrations.append(rule)

    def get(self, key: str) -> Optional[BrowserBuilder]:
        return self._builders.get(key)

    def require(self, key: str) -> BrowserBuilder:
        builder = self._builders.get(key)
        if builder is None:
            raise ConfigurationError(f"no browser registered for capability key {key!r}")
        return builder

    def is_registered(self, key: str) -> bool:
        return key in self._builders

    @property
    def keys(self) -> Tuple[str, ...]:
        return tuple(self._builders)

    @property
    def migrations(self) -> Tuple[MigrationRule, ...]:
        return tuple(self._migrations)

    def migration_for(self, source: str) -> Optional[MigrationRule]:
        for rule in self._migrations:
            if rule.source == source:
                return rule
        return None

    def copy(self) -> "BrowserRegistry":
        other = BrowserRegistry()
        other._builders = dict(self._builders)
        other._migrations = list(self._migrations)
        return other


def build_default_registry() -> BrowserRegistry:
    registry = BrowserRegistry()
    registry.register(ChromeOptions.KEY, BrowserBuilder(ChromeOptions, legacy_aliases=("chromeOptions",)))
    registry.register(FirefoxOptions.KEY, FirefoxBuilder())
    registry.register_migration(MigrationRule("firefox_profile", FirefoxOptions.KEY, "profile"))
    registry.register_migration(MigrationRule("firefox_binary", FirefoxOptions.KEY, "binary"))
    registry.register_migration(MigrationRule("chromeOptions", ChromeOptions.KEY, None, (dict,)))
    return registry


_DEFAULT_REGISTRY: Optional[BrowserRegistry] = None


def default_registry() -> BrowserRegistry:
    """Process-wide registry used when a Capabilities value is built without one."""
    global _DEFAULT_REGISTRY
    if _DEFAULT_REGISTRY is None:
        _DEFAULT_REGISTRY = build_default_registry()
    return _DEFAULT_REGISTRY


def register_browser(key: str, builder: BrowserBuilder) -> None:
    default_registry().register(key, builder)


__all__ = [
    "BrowserBuilder",
    "FirefoxBuilder",
    "MigrationRule",
    "BrowserRegistry",
    "build_default_registry",
    "default_registry",
    "register_browser",
]
