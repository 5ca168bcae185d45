"""Representative selection for clusters.

The representative supplies a cluster marker's image and anchor position.
One rule is applied to every cluster, whichever grouper produced it.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Tuple, List, Sequence

from memories.models import GeoPoint
from clustering.base import Cluster

REPRESENTATIVE_RULES = ("last", "most_recent")


@dataclass(frozen=True)
class Representative:
    """Marker-ready view of a cluster.

    Attributes:
        representative: Point drawn for the cluster.
        members: All member points, store order.
        count: Number of members.
        cluster: Source cluster.
    """

    representative: GeoPoint
    members: Tuple[GeoPoint, ...]
    count: int
    cluster: Cluster


def _most_recent_index(members: Sequence[GeoPoint]) -> int:
    # Undated members rank oldest; ties go to the later store position
    best = 0
    best_key = None
    for i, p in enumerate(members):
        dt = p.visit_datetime()
        key = (dt is not None, dt or datetime.min, i)
        if best_key is None or key > best_key:
            best, best_key = i, key
    return best


def select_representative(cluster: Cluster, rule: str = "last") -> Representative:
    """Pick the representative point of a cluster.

    Args:
        cluster: Non-empty cluster.
        rule: "last" picks the last member in store order (most recently
            added); "most_recent" picks the latest visit_date and falls back
            to store order when dates are missing or tied.

    Returns:
        Representative for the cluster.

    Raises:
        ValueError: If the cluster is empty or the rule is unknown.
    """
    if not cluster.members:
        raise ValueError(f"Cluster {cluster.key} has no members")
    if rule == "last":
        index = len(cluster.members) - 1
    elif rule == "most_recent":
        index = _most_recent_index(cluster.members)
    else:
        raise ValueError(f"Unknown representative rule: {rule}. Must be one of: {', '.join(REPRESENTATIVE_RULES)}")

    return Representative(
        representative=cluster.members[index],
        members=cluster.members,
        count=cluster.count,
        cluster=cluster,
    )


def select_representatives(clusters: Sequence[Cluster], rule: str = "last") -> List[Representative]:
    return [select_representative(c, rule=rule) for c in clusters]
