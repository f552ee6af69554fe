"""Euclidean distance in normalized objective space."""

import math
from typing import List

from ..models import Candidate


def objective_distance(a: Candidate, b: Candidate) -> float:
    """Distance over the union of both candidates' objectives; absent axes count as 0.0."""
    names = _objective_union(a, b)
    if not names:
        return 0.0
    return math.sqrt(sum((a.objective(name) - b.objective(name)) ** 2 for name in names))


def _objective_union(a: Candidate, b: Candidate) -> List[str]:
    names = a.objective_names()
    names.extend(name for name in b.objective_names() if name not in names)
    return names
