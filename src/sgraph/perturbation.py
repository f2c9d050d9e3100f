from dataclasses import dataclass
from typing import List, Optional
from enum import Enum
import random

_FLIP = {"0": "1", "1": "0"}


class PerturbationKind(Enum):
    FLIP_LSB = "flip_lsb"
    FLIP_ALL = "flip_all"
    FLIP_RANDOM_K = "flip_random_k"


@dataclass(frozen=True)
class PerturbationPolicy:
    """
    Decides which bits of a register are inverted for a perturbation trial.

    Values are bit strings, most significant bit first. Only ``0``/``1`` bits
    are ever flipped; ``x``/``z`` bits are left alone. A single-bit value is
    simply inverted by every policy.
    """
    kind: PerturbationKind = PerturbationKind.FLIP_LSB
    k: int = 1  # bits flipped by FLIP_RANDOM_K
    seed: int = 0

    def __post_init__(self):
        """Validate policy parameters."""
        if not isinstance(self.kind, PerturbationKind):
            raise ValueError("kind must be a PerturbationKind enum value")
        if self.k < 1:
            raise ValueError("k must be at least 1")

    @classmethod
    def from_dict(cls, params: dict) -> 'PerturbationPolicy':
        """Create a PerturbationPolicy from a dictionary of parameters."""
        return cls(
            kind=PerturbationKind(params.get('kind', 'flip_lsb')),
            k=params.get('k', 1),
            seed=params.get('seed', 0),
        )

    def to_dict(self) -> dict:
        """Convert policy to dictionary."""
        return {'kind': self.kind.value, 'k': self.k, 'seed': self.seed}

    def perturb(self, value: str, signal: str = "") -> Optional[str]:
        """
        Compute the perturbed version of a value.

        Args:
            value: Current value as a bit string
            signal: Identifier of the perturbed signal, used to derive a
                per-signal random stream for FLIP_RANDOM_K

        Returns:
            The perturbed value, or None when no bit could be flipped
        """
        if not value:
            return None
        positions = self._select_bits(value, signal)
        bits = list(value)
        for pos in positions:
            if bits[pos] in _FLIP:
                bits[pos] = _FLIP[bits[pos]]
        perturbed = "".join(bits)
        if perturbed == value:
            return None
        return perturbed

    def _select_bits(self, value: str, signal: str) -> List[int]:
        """Pick string indices of the bits to invert."""
        width = len(value)
        lsb = width - 1
        if width == 1 or self.kind == PerturbationKind.FLIP_LSB:
            return [lsb]
        if self.kind == PerturbationKind.FLIP_ALL:
            return list(range(width))
        # Seeded per signal so the choice is stable across runs and processes
        rng = random.Random(f"{self.seed}:{signal}")
        return rng.sample(range(width), min(self.k, width))
