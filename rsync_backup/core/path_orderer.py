from __future__ import annotations

from collections import deque

from .backup_config import ResolvedPath


class PathOrderer:
    """Interleave paths across hosts so one host is not hit by parallel jobs.

    Paths are grouped per host, keeping their declared order, then emitted
    round-robin over the sorted host names until every queue is drained.
    """

    def order(self, paths: list[ResolvedPath]) -> list[ResolvedPath]:
        queues: dict[str, deque[ResolvedPath]] = {}
        for path in paths:
            queues.setdefault(path.host, deque()).append(path)

        hosts = sorted(queues)
        ordered: list[ResolvedPath] = []
        while len(ordered) < len(paths):
            for host in hosts:
                if queues[host]:
                    ordered.append(queues[host].popleft())
        return ordered
