"""
The canonical capabilities value and its two wire shapes.

One in-memory mapping is kept per value. ``to_legacy_payload`` and
``to_w3c_payload`` derive the JSON Wire Protocol and W3C shapes from it on
demand; nothing is cached, so the two can never diverge.
"""

import copy
from collections.abc import MutableMapping
from typing import Any, Dict, Iterator, List, Mapping, Optional

from ..decorators import in_phase
from ..errors import PHASE_CAPABILITIES, ConfigurationError
from .browsers import BrowserOptions
from .registry import BrowserRegistry, default_registry

import logging
logger = logging.getLogger(__name__)


W3C_STANDARD_CAPABILITIES = frozenset({
    "acceptInsecureCerts",
    "browserName",
    "browserVersion",
    "platformName",
    "pageLoadStrategy",
    "proxy",
    "setWindowRect",
    "strictFileInteractability",
    "timeouts",
    "unhandledPromptBehavior",
    "webSocketUrl",
})

# Legacy flat names with a direct W3C counterpart.
LEGACY_ALIASES = {
    "version": "browserVersion",
    "platform": "platformName",
}

# Legacy "match anything" values; W3C expresses these by omission.
LEGACY_WILDCARDS = ("", "ANY", "any")


class Capabilities(MutableMapping):
    """
    Desired session properties.

    Values stored under a registered browser key are held as that browser's
    ``BrowserOptions`` object; assigning a plain mapping there converts it.
    ``first_match`` holds the optional W3C ``firstMatch`` alternatives.
    """

    def __init__(
        self,
        values: Optional[Mapping[str, Any]] = None,
        registry: Optional[BrowserRegistry] = None,
        first_match: Optional[List[Mapping[str, Any]]] = None,
    ):
        self._registry = registry or default_registry()
        self._values: Dict[str, Any] = {}
        self.first_match: List[Dict[str, Any]] = [dict(m) for m in (first_match or [])]
        for name, value in (values or {}).items():
            self[name] = value

    # -- mapping protocol ---------------------------------------------------

    def __getitem__(self, name: str) -> Any:
        return self._values[name]

    def __setitem__(self, name: str, value: Any) -> None:
        builder = self._registry.get(name)
        if builder is not None:
            value = builder.parse(name, value)
        self._values[name] = value

    def __delitem__(self, name: str) -> None:
        del self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Capabilities):
            return self._values == other._values and self.first_match == other.first_match
        if isinstance(other, Mapping):
            return self._values == dict(other)
        return NotImplemented

    __hash__ = None

    def __repr__(self) -> str:
        return f"Capabilities({self._values!r})"

    # -- helpers ------------------------------------------------------------

    @property
    def registry(self) -> BrowserRegistry:
        return self._registry

    def copy(self) -> "Capabilities":
        """Deep snapshot sharing only the registry."""
        other = Capabilities(registry=self._registry)
        other._values = copy.deepcopy(self._values)
        other.first_match = copy.deepcopy(self.first_match)
        return other

    def browser_options(self, key: str) -> BrowserOptions:
        """
        Return the options object stored under a registered browser key,
        creating an empty one if absent. Mutations apply to this value.
        """
        builder = self._registry.require(key)
        if key not in self._values:
            self._values[key] = builder.new_options()
        return self._values[key]

    def set_browser_options(self, options: BrowserOptions) -> None:
        """Store a copy of ``options`` under its registered key."""
        self._values[options.KEY] = self._registry.require(options.KEY).parse(options.KEY, options)

    def merge(self, addition: Mapping[str, Any]) -> "Capabilities":
        return merge(self, addition)

    # -- wire shapes --------------------------------------------------------

    @in_phase(PHASE_CAPABILITIES)
    def to_legacy_payload(self) -> Dict[str, Any]:
        """Flat mapping sent as ``desiredCapabilities``."""
        payload: Dict[str, Any] = {}
        plain: Dict[str, Any] = {}
        for name, value in self._values.items():
            builder = self._registry.get(name)
            if builder is not None:
                payload.update(builder.render_legacy(name, builder.parse(name, value)))
            else:
                plain[name] = copy.deepcopy(value)
        # Values the caller set explicitly win over builder aliases.
        payload.update(plain)
        return payload

    @in_phase(PHASE_CAPABILITIES)
    def to_w3c_payload(self) -> Dict[str, Any]:
        """
        ``{"alwaysMatch": {...}, "firstMatch": [...]}`` with every migration
        rule applied. Raises ConfigurationError for fields that cannot be
        placed rather than dropping them.
        """
        options: Dict[str, BrowserOptions] = {}
        always: Dict[str, Any] = {}

        for name, value in self._values.items():
            builder = self._registry.get(name)
            if builder is not None:
                options[name] = builder.parse(name, value)
            elif self._registry.migration_for(name) is not None:
                continue
            elif name in LEGACY_ALIASES:
                self._migrate_alias(name, value, always)
            elif name in W3C_STANDARD_CAPABILITIES or ":" in name:
                always[name] = copy.deepcopy(value)
            else:
                raise ConfigurationError(
                    f"capability {name!r} has no W3C equivalent; remove it or use an extension key (vendor:name)"
                )

        for rule in self._registry.migrations:
            if rule.source not in self._values:
                continue
            builder = self._registry.get(rule.target)
            if builder is None:
                raise ConfigurationError(
                    f"capability {rule.source!r} migrates to {rule.target!r}, but no browser is registered for {rule.target!r}"
                )
            target = options.get(rule.target) or builder.new_options()
            options[rule.target] = self._apply_migration(rule, builder, target, self._values[rule.source])

        for name, opts in options.items():
            always.update(self._registry.require(name).render_w3c(name, opts))

        first_match = copy.deepcopy(self.first_match) or [{}]
        for entry in first_match:
            overlap = sorted(set(entry) & set(always))
            if overlap:
                raise ConfigurationError(f"firstMatch entry repeats alwaysMatch capabilities {overlap}")

        return {"alwaysMatch": always, "firstMatch": first_match}

    def _migrate_alias(self, name: str, value: Any, always: Dict[str, Any]) -> None:
        target = LEGACY_ALIASES[name]
        if value is None or value in LEGACY_WILDCARDS:
            logger.debug(f"Omitting wildcard {name}={value!r} from W3C capabilities")
            return
        existing = self._values.get(target)
        if existing is not None and existing != value:
            raise ConfigurationError(
                f"capability {name!r}={value!r} conflicts with {target!r}={existing!r}"
            )
        always[target] = copy.deepcopy(value)

    @staticmethod
    def _apply_migration(rule, builder, target: BrowserOptions, value: Any) -> BrowserOptions:
        if rule.field is None:
            migrated = builder.parse(rule.source, value)
            clashes = target.conflicts(migrated)
            if clashes:
                raise ConfigurationError(
                    f"capability {rule.source!r} conflicts with {rule.target!r} on fields {clashes}"
                )
            logger.debug(f"Migrated {rule.source!r} into {rule.target!r}")
            return target.merge(migrated)

        if not isinstance(value, rule.expected_type):
            raise ConfigurationError(
                f"capability {rule.source!r} cannot migrate to {rule.target}.{rule.field}: "
                f"unexpected type {type(value).__name__}"
            )
        current = getattr(target, rule.field)
        if current not in (None, "") and current != value:
            raise ConfigurationError(
                f"capability {rule.source!r} conflicts with {rule.target}.{rule.field} already set"
            )
        migrated = target.copy()
        setattr(migrated, rule.field, copy.deepcopy(value))
        logger.debug(f"Migrated {rule.source!r} to {rule.target}.{rule.field}")
        return migrated


def merge(existing: Mapping[str, Any], addition: Mapping[str, Any]) -> Capabilities:
    """
    Combine two capability mappings into a new Capabilities value.

    Keys in ``addition`` override ``existing``; registered browser options
    present on both sides are merged field by field at their own key.
    ``firstMatch`` alternatives are appended unless already present.
    """
    if isinstance(existing, Capabilities):
        result = existing.copy()
    else:
        registry = addition.registry if isinstance(addition, Capabilities) else None
        result = Capabilities(existing, registry=registry)

    registry = result.registry
    for name, value in addition.items():
        builder = registry.get(name)
        if builder is not None and name in result:
            result[name] = builder.parse(name, result[name]).merge(builder.parse(name, value))
        else:
            result[name] = copy.deepcopy(value)

    if isinstance(addition, Capabilities):
        for entry in addition.first_match:
            if entry not in result.first_match:
                result.first_match.append(copy.deepcopy(entry))
    return result


__all__ = [
    "W3C_STANDARD_CAPABILITIES",
    "LEGACY_ALIASES",
    "Capabilities",
    "merge",
]
