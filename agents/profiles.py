"""
AI Behaviour Profiles

Named parameter bundles for the Monte-Carlo agent. Presets follow the same
frozen-dataclass pattern as the engine's rule sets.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class BehaviorProfile:
    """
    Tuning knobs for one AI personality.

    Attributes:
        name: Profile name used for lookup
        rollout_depth: Maximum draws per rollout
        rollout_count: Rollouts per candidate action (0 = heuristic only)
        attack_bias: Weight of the offense term
        defense_bias: Weight of the safety term
        call_aggressiveness: Scale of the bonus for claims that improve shanten
    """
    name: str
    rollout_depth: int
    rollout_count: int
    attack_bias: float
    defense_bias: float
    call_aggressiveness: float

    def __post_init__(self):
        if self.rollout_depth < 0 or self.rollout_count < 0:
            raise ValueError(f"Rollout depth and count must be non-negative: {self}")


AGGRESSIVE = BehaviorProfile(
    name="aggressive",
    rollout_depth=10,
    rollout_count=20,
    attack_bias=0.8,
    defense_bias=0.2,
    call_aggressiveness=0.7,
)

BALANCED = BehaviorProfile(
    name="balanced",
    rollout_depth=30,
    rollout_count=200,
    attack_bias=0.5,
    defense_bias=0.5,
    call_aggressiveness=0.3,
)

DEFENSIVE = BehaviorProfile(
    name="defensive",
    rollout_depth=40,
    rollout_count=150,
    attack_bias=0.3,
    defense_bias=0.7,
    call_aggressiveness=0.1,
)

PROFILES = {p.name: p for p in (AGGRESSIVE, BALANCED, DEFENSIVE)}

DEFAULT_PROFILE = AGGRESSIVE


def get_profile(name: str) -> BehaviorProfile:
    """Look up a preset by name (case-insensitive)"""
    try:
        return PROFILES[name.lower()]
    except KeyError:
        raise ValueError(f"Unknown profile {name!r}, expected one of {sorted(PROFILES)}") from None
