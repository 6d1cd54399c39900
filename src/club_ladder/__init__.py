"""Club Ladder.

Track players on a ranked challenge ladder, record match results and
re-rank the ladder when a lower-ranked player wins.
"""

from club_ladder.ranking import RankChange, RankResolution, apply_resolution, resolve
from club_ladder.services.ladder import LadderService

__version__ = "0.1.0"
__all__ = [
    "LadderService",
    "RankChange",
    "RankResolution",
    "__version__",
    "apply_resolution",
    "resolve",
]
