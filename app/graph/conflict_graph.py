from collections import defaultdict
from typing import Dict, List, Set

from app.models.comparison import TimeConflict


def build_conflict_graph(conflicts: List[TimeConflict]) -> Dict[str, Set[str]]:
    graph: Dict[str, Set[str]] = defaultdict(set)
    for conflict in conflicts:
        t1, t2 = conflict.conflicting_tasks
        graph[t1.id].add(t2.id)
        graph[t2.id].add(t1.id)
    return graph
