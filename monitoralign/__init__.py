from .alignment import canonical_value, cluster, cluster_pairwise, plan
from .models import Axis, Correction, MonitorEntry

__all__ = [
    "Axis",
    "Correction",
    "MonitorEntry",
    "canonical_value",
    "cluster",
    "cluster_pairwise",
    "plan",
]
