import time
from dataclasses import dataclass, field


@dataclass
class QueueEntry:
    user_id: int
    joined_at: float = field(default_factory=time.time)


class MatchmakingQueue:
    """Per-game-type waiting lists, earliest joiner first.

    A user appears at most once per game type.
    """

    def __init__(self, clock=time.time):
        self._clock = clock
        self._queues = {}

    def enqueue(self, game_type, user_id):
        self.dequeue(game_type, user_id)
        entry = QueueEntry(user_id, self._clock())
        self._queues.setdefault(game_type, []).append(entry)
        return entry

    def dequeue(self, game_type, user_id):
        q = self._queues.get(game_type)
        if not q:
            return False
        before = len(q)
        q[:] = [e for e in q if e.user_id != user_id]
        removed = len(q) != before
        if not q:
            del self._queues[game_type]
        return removed

    def remove_user(self, user_id):
        return [gt for gt in list(self._queues) if self.dequeue(gt, user_id)]

    def entries(self, game_type):
        return list(self._queues.get(game_type, ()))

    def user_ids(self, game_type):
        return [e.user_id for e in self._queues.get(game_type, ())]

    def contains(self, game_type, user_id):
        return user_id in self.user_ids(game_type)

    def __len__(self):
        return sum(len(q) for q in self._queues.values())

    def pop_pair(self, game_type, friend_pairs=(), candidates=None):
        """Remove and return the next two entries to play each other.

        Pairs are scanned in queue order and the first pair that are not
        friends wins; if everyone waiting is friends with everyone else the
        two earliest are paired. ``candidates`` restricts the scan to users
        whose friendships are known. This is quadratic in queue depth.
        """
        q = self._queues.get(game_type, [])
        pool = [e for e in q if candidates is None or e.user_id in candidates]
        if len(pool) < 2:
            return None
        pair = None
        for i, first in enumerate(pool):
            for second in pool[i + 1:]:
                if frozenset((first.user_id, second.user_id)) not in friend_pairs:
                    pair = (first, second)
                    break
            if pair:
                break
        if pair is None:
            pair = (pool[0], pool[1])
        q[:] = [e for e in q if e not in pair]
        if not q:
            self._queues.pop(game_type, None)
        return pair

    def restore(self, game_type, entries):
        """Put entries back (e.g. after a failed pairing), keeping join order."""
        q = self._queues.setdefault(game_type, [])
        present = {e.user_id for e in q}
        q.extend(e for e in entries if e.user_id not in present)
        q.sort(key=lambda e: e.joined_at)
