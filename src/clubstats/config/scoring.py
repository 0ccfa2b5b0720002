"""Weight table for choosing between duplicate team-scoped player documents."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ScoringWeights:
    """Additive weights; each tier must dominate the sum of every tier below it.

    Precedence: team affinity > season affinity > data richness > recency.
    Recency adds the latest season's start year, so richness weights must stay
    above any plausible year and season affinity above all richness signals.
    """

    team_affinity: int = 100_000_000
    season_affinity: int = 10_000_000
    season_params: int = 1_000_000
    season_profile: int = 500_000
    root_params: int = 100_000
    root_profile: int = 50_000

    def richness_ceiling(self) -> int:
        return self.season_params + self.season_profile + self.root_params + self.root_profile + 9_999


DEFAULT_WEIGHTS = ScoringWeights()
