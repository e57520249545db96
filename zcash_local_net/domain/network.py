"""Network upgrade parameters for regtest daemons.

A regtest node activates each network upgrade at a configurable block height,
passed to zcashd as `nuparams=<consensus branch id>:<height>`.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from enum import Enum


class NetworkUpgrade(str, Enum):
    """Network upgrades in activation order, valued by consensus branch id."""

    OVERWINTER = "5ba81b19"
    SAPLING = "76b809bb"
    BLOSSOM = "2bb40e60"
    HEARTWOOD = "f5b9230b"
    CANOPY = "e9ff75a6"
    NU5 = "c2d6d0b4"
    NU6 = "c8e71055"

    @property
    def branch_id(self) -> str:
        """Hex-encoded consensus branch id."""
        return self.value


@dataclass(frozen=True)
class ActivationHeights:
    """Block heights at which each network upgrade activates.

    Field names match the lower-cased NetworkUpgrade member names.

    Raises:
        ValueError: If a height is below 1 or an upgrade activates before
            the one preceding it.
    """

    overwinter: int = 1
    sapling: int = 1
    blossom: int = 1
    heartwood: int = 1
    canopy: int = 1
    nu5: int = 1
    nu6: int = 1

    def __post_init__(self) -> None:
        """Validate heights after initialization."""
        previous_name = None
        previous_height = 1
        for f in fields(self):
            height = getattr(self, f.name)
            if height < 1:
                raise ValueError(f"{f.name} activation height must be >= 1, got {height}")
            if height < previous_height:
                raise ValueError(
                    f"{f.name} ({height}) cannot activate before "
                    f"{previous_name} ({previous_height})"
                )
            previous_name, previous_height = f.name, height

    def height_of(self, upgrade: NetworkUpgrade) -> int:
        """Return the activation height of a network upgrade."""
        return getattr(self, upgrade.name.lower())

    def nuparams(self) -> list[str]:
        """Render `<branch id>:<height>` pairs in activation order."""
        return [f"{upgrade.branch_id}:{self.height_of(upgrade)}" for upgrade in NetworkUpgrade]

    @classmethod
    def from_mapping(cls, data: dict[str, int]) -> ActivationHeights:
        """Build from a partial name -> height mapping.

        Unspecified upgrades keep their defaults.

        Raises:
            ValueError: If a key is not a known network upgrade.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(
                f"Unknown network upgrade(s): {', '.join(unknown)} "
                f"(valid: {', '.join(sorted(known))})"
            )
        return cls(**data)
