"""Normalize specifier updater configurations into a single callable."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Mapping

from specifier_sync.config import ConfigurationError
from specifier_sync.parsers.specifier_parser import Spec

Matcher = Callable[[Spec], "str | None"]

# JavaScript-style group references ("$1") in replacement templates
_JS_GROUP_REF = re.compile(r"\$(\d+)")


@dataclass(frozen=True)
class SpecifierRule:
    pattern: re.Pattern
    template: str

    def apply(self, value: str) -> str | None:
        """Return the rewritten value, or None if the pattern does not match."""
        if self.pattern.search(value) is None:
            return None
        return self.pattern.sub(self.template, value, count=1)


def compile_rule(pattern: str, template: str) -> SpecifierRule:
    """Compile one pattern -> template pair, raising ConfigurationError on bad input."""
    try:
        compiled = re.compile(pattern)
    except re.error as e:
        raise ConfigurationError(f"Invalid specifier pattern {pattern!r}: {e}") from e
    template = _JS_GROUP_REF.sub(r"\\g<\1>", template)
    # Surface bad group references now instead of at rewrite time
    groups = {int(g) for g in re.findall(r"\\g<(\d+)>", template)}
    groups.update(int(g) for g in re.findall(r"\\(\d+)", template))
    missing = sorted(g for g in groups if g > compiled.groups)
    if missing:
        raise ConfigurationError(
            f"Replacement {template!r} references group(s) {missing} "
            f"but pattern {pattern!r} has {compiled.groups}"
        )
    return SpecifierRule(pattern=compiled, template=template)


def rules_matcher(rules: list[SpecifierRule]) -> Matcher:
    """First rule whose pattern matches the specifier value wins."""

    def match(spec: Spec) -> str | None:
        for rule in rules:
            replacement = rule.apply(spec.value)
            if replacement is not None:
                return replacement
        return None

    return match


def literal_matcher(table: Mapping[str, str]) -> Matcher:
    """Exact value lookup; no pattern semantics."""
    lookup = dict(table)

    def match(spec: Spec) -> str | None:
        return lookup.get(spec.value)

    return match


def _unchanged(spec: Spec) -> None:
    return None


def normalize_updater(config) -> Matcher:
    """Collapse a callable, a pattern table, or nothing into one Matcher."""
    if config is None:
        return _unchanged
    if callable(config):
        return config
    if isinstance(config, Mapping):
        if not config:
            return _unchanged
        rules = []
        for pattern, template in config.items():
            if not isinstance(pattern, str) or not isinstance(template, str):
                raise ConfigurationError(
                    f"Pattern table entries must be strings, got {pattern!r}: {template!r}"
                )
            rules.append(compile_rule(pattern, template))
        return rules_matcher(rules)
    raise ConfigurationError(
        f"handler must be a callable or a pattern table, got {type(config).__name__}"
    )
