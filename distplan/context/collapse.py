"""Branch collapsing.

Per-platform values that are structurally equal are represented once, so the
rendered document only branches on the platforms that actually differ.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Arm[T]:
    """One branch arm: the platforms that share `value`."""

    platforms: tuple[str, ...]
    value: T


@dataclass(frozen=True, slots=True)
class Collapsed[T]:
    unified: bool
    value: T | None
    arms: tuple[Arm[T], ...]

    @property
    def branch_count(self) -> int:
        return 0 if self.unified else len(self.arms)


def collapse[T](values: Mapping[str, T]) -> Collapsed[T]:
    """Group platforms by equal values, in first-seen order.

    A single group collapses to `unified=True` with the shared value and no
    arms. Otherwise every distinct value gets one arm.
    """
    if not values:
        raise ValueError("collapse() needs at least one platform")

    groups: list[tuple[T, list[str]]] = []
    for platform, value in values.items():
        for existing, platforms in groups:
            if existing == value:
                platforms.append(platform)
                break
        else:
            groups.append((value, [platform]))

    if len(groups) == 1:
        return Collapsed(unified=True, value=groups[0][0], arms=())

    arms = tuple(Arm(platforms=tuple(p), value=v) for v, p in groups)
    return Collapsed(unified=False, value=None, arms=arms)
