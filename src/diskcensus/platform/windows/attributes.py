"""
Boolean disk attribute fusion.

The tool prints its own "Boot Disk : Yes" style lines, but their keys and
values are localized. Attributes are derived from an AttributeProvider
instead, and any lookup that fails or has no data yields False.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from diskcensus.core.logging import get_logger
from diskcensus.core.models import AttributeSet, DiskProperties
from diskcensus.platform.base import AttributeProvider

logger = get_logger(__name__)

DRIVE_PATH = re.compile(r"^\s*([A-Za-z]):")


@dataclass(frozen=True)
class Derivation:
    """Outcome of one attribute lookup. ``value`` is None when unknown."""

    value: bool | None
    reason: str | None = None


class LookupCache:
    """
    Memo of provider lookups for one inventory run.

    Failures are cached along with values so a broken source is queried
    once per run.
    """

    def __init__(self) -> None:
        self._entries: dict[str, tuple[Any, str | None]] = {}

    def fetch(self, key: str, loader: Callable[[], Any]) -> tuple[Any, str | None]:
        """Return ``(value, None)`` or ``(None, reason)`` for ``key``."""
        if key not in self._entries:
            try:
                self._entries[key] = (loader(), None)
            except Exception as e:
                self._entries[key] = (None, f"{type(e).__name__}: {e}")
        return self._entries[key]

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def clear(self) -> None:
        self._entries.clear()


def drive_letter_of(path: str | None) -> str | None:
    """Return the upper-case drive letter of a Windows path."""
    if not path:
        return None
    match = DRIVE_PATH.match(path)
    return match.group(1).upper() if match else None


class AttributeFuser:
    """Builds an AttributeSet per disk from provider lookups."""

    def __init__(self, provider: AttributeProvider, cache: LookupCache | None = None) -> None:
        self.provider = provider
        self.cache = cache if cache is not None else LookupCache()

    def properties(self, number: int) -> DiskProperties | None:
        """Provider properties for a disk, or None when unavailable."""
        value, _reason = self._lookup_properties(number)
        return value if isinstance(value, DiskProperties) else None

    def _lookup_properties(self, number: int) -> tuple[DiskProperties | None, str | None]:
        return self.cache.fetch(
            f"properties:{number}", lambda: self.provider.by_disk_number(number)
        )

    def fuse(self, number: int) -> AttributeSet:
        derivations = {
            "current_read_only": self._derive(self._property_flag, number, "is_read_only"),
            "read_only": self._derive(self._property_flag, number, "is_read_only"),
            "boot_disk": self._derive(self._boot_flag, number),
            "pagefile_disk": self._derive(
                self._feature_flag, number, "pagefile", self.provider.pagefile_paths
            ),
            "hibernation_file_disk": self._derive(
                self._feature_flag, number, "hibernation", self._hibernation_paths
            ),
            "crashdump_disk": self._derive(
                self._feature_flag, number, "crashdump", self.provider.crashdump_paths
            ),
            "clustered_disk": self._derive(self._property_flag, number, "is_clustered"),
        }

        values: dict[str, bool] = {}
        for name, derivation in derivations.items():
            if derivation.value is None:
                logger.debug(
                    "Attribute defaulted to false",
                    disk=number,
                    attribute=name,
                    reason=derivation.reason,
                )
            values[name] = bool(derivation.value)

        return AttributeSet(**values)

    @staticmethod
    def _derive(rule: Callable[..., Derivation], *args: Any) -> Derivation:
        """Run one derivation rule; malformed provider data counts as unknown."""
        try:
            return rule(*args)
        except Exception as e:
            return Derivation(None, f"{type(e).__name__}: {e}")

    def _property_flag(self, number: int, attribute: str) -> Derivation:
        value, reason = self._lookup_properties(number)
        if reason:
            return Derivation(None, reason)
        if value is None:
            return Derivation(None, "no properties for disk")
        if not isinstance(value, DiskProperties):
            return Derivation(None, f"unexpected properties type {type(value).__name__}")
        flag = getattr(value, attribute)
        if flag is None:
            return Derivation(None, f"{attribute} not reported")
        return Derivation(bool(flag))

    def _boot_flag(self, number: int) -> Derivation:
        boot = self._property_flag(number, "is_boot")
        system = self._property_flag(number, "is_system")
        if boot.value or system.value:
            return Derivation(True)
        if boot.value is None and system.value is None:
            return Derivation(None, boot.reason)
        return Derivation(False)

    def _hibernation_paths(self) -> list[str]:
        path = self.provider.hibernation_file_path()
        return [path] if path else []

    def _feature_flag(
        self,
        number: int,
        feature: str,
        loader: Callable[[], list[str]],
    ) -> Derivation:
        """Whether any of a feature's files lives on a drive of this disk."""
        letters, reason = self.cache.fetch("drive_letters", self.provider.drive_letter_map)
        if reason:
            return Derivation(None, f"drive letter map: {reason}")

        paths, reason = self.cache.fetch(f"feature:{feature}", loader)
        if reason:
            return Derivation(None, f"{feature} paths: {reason}")
        if not paths:
            return Derivation(False)

        letters = letters or {}
        for path in paths:
            letter = drive_letter_of(path) if isinstance(path, str) else None
            if letter is None:
                logger.debug("Feature path has no drive letter", feature=feature, path=path)
                continue
            if letters.get(letter) == number:
                return Derivation(True)
        return Derivation(False)
