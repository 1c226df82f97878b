from .image import FatalFault

SYSTEM = "system"
FREE_PER_CHAIN_BLOCK = 9


class UsageTracker:
    def __init__(self, geometry, reporter):
        self.geometry = geometry
        self.reporter = reporter
        self.free = set()
        self.used = {}  # block -> owner (inode number or SYSTEM)

    def is_free(self, block):
        return block in self.free

    def is_used(self, block):
        return block in self.used

    def claim_used(self, block, owner=SYSTEM):
        if block >= self.geometry.num_blocks:
            raise FatalFault(f"block {block} claimed by {describe(owner)} "
                             f"is beyond block {self.geometry.num_blocks - 1}")
        if block in self.free:
            self.reporter.finding(f"free block {block} being reused "
                                  f"by {describe(owner)}")
        if block in self.used:
            self.reporter.finding(
                f"in-use block {block} re-used by {describe(owner)} "
                f"(already used by {describe(self.used[block])})")
        else:
            self.used[block] = owner

    def claim_free(self, block):
        if block in self.free:
            self.reporter.finding(f"block {block} multiply free")
        self.free.add(block)

    def unaccounted(self):
        return [b for b in range(self.geometry.last_free_block + 1)
                if b not in self.free and b not in self.used]


def describe(owner):
    if owner == SYSTEM:
        return "the system area"
    return f"i-node {owner}"


class FreeListBuilder:
    """Follows the free list chain, which starts at word 0 of block 0."""

    def __init__(self, store, tracker, reporter):
        self.store = store
        self.tracker = tracker
        self.reporter = reporter

    def build(self):
        g = self.store.geometry
        chain = self.store.word_at(0, 0)
        seen = set()
        while chain != 0:
            if chain in seen:
                self.reporter.finding(f"free list loops back to block {chain}")
                return
            if len(seen) >= g.num_blocks:
                self.reporter.finding(
                    f"free list does not terminate after {len(seen)} blocks")
                return
            seen.add(chain)
            self._check(chain, "free list chain pointer")
            self.reporter.trace(f"free list block {chain}")
            self.tracker.claim_free(chain)
            for pos in range(1, FREE_PER_CHAIN_BLOCK + 1):
                block = self.store.word_at(chain, pos)
                if block == 0:
                    continue
                self._check(block, f"free list entry in block {chain}")
                self.tracker.claim_free(block)
            chain = self.store.word_at(chain, 0)

    def _check(self, block, what):
        if block >= self.store.geometry.num_blocks:
            raise FatalFault(f"{what} {block} is beyond block "
                             f"{self.store.geometry.num_blocks - 1}")
