"""
polycache - Expiration Policy Resolver

Translates a (duration, kind) pair into the expiration directive a backend can
actually honor. The degradation rule for backends without sliding expiration
lives here and only here: adapters consult their BackendCapabilities instead of
switching on the kind themselves.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Any

from ..errors import UnsupportedExpirationKindError

logger = logging.getLogger(__name__)


class ExpirationKind(str, Enum):
    """How an entry's lifetime is measured."""

    ABSOLUTE = "absolute"
    """Entry becomes unreachable a fixed duration after it was written."""

    SLIDING = "sliding"
    """Entry's timer resets on every successful read (memory backend only)."""


@dataclass(frozen=True)
class BackendCapabilities:
    """Expiration features a backend supports natively."""

    name: str
    supports_sliding: bool


MEMORY_CAPABILITIES = BackendCapabilities(name="memory", supports_sliding=True)
REDIS_CAPABILITIES = BackendCapabilities(name="redis", supports_sliding=False)
MEMCACHED_CAPABILITIES = BackendCapabilities(name="memcached", supports_sliding=False)


@dataclass(frozen=True)
class ExpirationDirective:
    """
    Backend-native expiration for a single write.

    Attributes:
        kind: Kind the backend will apply
        duration: Non-negative lifetime
        requested: Kind the caller asked for
    """

    kind: ExpirationKind
    duration: timedelta
    requested: ExpirationKind

    @property
    def degraded(self) -> bool:
        """True when a sliding request is being applied as absolute."""
        return self.kind is not self.requested

    @property
    def seconds(self) -> float:
        return self.duration.total_seconds()

    @property
    def already_expired(self) -> bool:
        """A zero lifetime makes the entry unreachable as soon as it is written."""
        return self.duration <= timedelta(0)


def normalize_duration(duration: timedelta | float | int) -> timedelta:
    """
    Convert a duration to a non-negative timedelta.

    Numbers are interpreted as seconds. Negative durations clamp to zero;
    NaN, infinities and values beyond the timedelta range raise ValueError.
    """
    if isinstance(duration, bool) or not isinstance(duration, (timedelta, int, float)):
        raise TypeError(f"expiration must be a timedelta or number of seconds, got {type(duration).__name__}")

    if not isinstance(duration, timedelta):
        try:
            if not math.isfinite(duration):
                raise ValueError(f"expiration must be a finite number of seconds, got {duration!r}")
            duration = timedelta(seconds=duration)
        except OverflowError as e:
            raise ValueError(f"expiration is out of range: {duration!r}") from e

    if duration < timedelta(0):
        return timedelta(0)
    return duration


def normalize_kind(kind: Any) -> ExpirationKind:
    """
    Coerce an ExpirationKind member or its string value.

    Raises:
        UnsupportedExpirationKindError: If kind is outside {absolute, sliding}
    """
    if isinstance(kind, ExpirationKind):
        return kind
    if isinstance(kind, str):
        try:
            return ExpirationKind(kind.lower())
        except ValueError:
            pass
    raise UnsupportedExpirationKindError(kind, supported=[k.value for k in ExpirationKind])


def resolve_expiration(
    duration: timedelta | float | int,
    kind: ExpirationKind | str,
    capabilities: BackendCapabilities,
) -> ExpirationDirective:
    """
    Resolve the expiration a backend will apply for a write.

    Sliding on a backend without sliding support is accepted and applied as
    absolute; it never raises.

    Args:
        duration: Entry lifetime (timedelta or seconds)
        kind: Requested expiration kind
        capabilities: Target backend's capabilities

    Returns:
        ExpirationDirective for the backend

    Raises:
        UnsupportedExpirationKindError: If kind is not a known ExpirationKind
        TypeError: If duration is not a timedelta or number
        ValueError: If duration is NaN, infinite or out of range
    """
    requested = normalize_kind(kind)
    lifetime = normalize_duration(duration)

    applied = requested
    if requested is ExpirationKind.SLIDING and not capabilities.supports_sliding:
        applied = ExpirationKind.ABSOLUTE
        logger.debug(
            "Backend '%s' does not support sliding expiration; applying absolute",
            capabilities.name,
            extra={"backend": capabilities.name, "duration_seconds": lifetime.total_seconds()},
        )

    return ExpirationDirective(kind=applied, duration=lifetime, requested=requested)
