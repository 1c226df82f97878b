from .inode import InodeTable
from .report import Reporter
from .usage import SYSTEM, FreeListBuilder, UsageTracker
from .walker import DirectoryWalker

ROOT_INODE = 4      # primary directory
RAW_ROOT_INODE = 2


class Checker:
    """Runs every pass over one loaded image and owns the shared state."""

    def __init__(self, store, reporter=None):
        self.store = store
        self.geometry = store.geometry
        self.reporter = reporter or Reporter()
        self.tracker = UsageTracker(self.geometry, self.reporter)
        self.inodes = InodeTable(store)
        self.walker = DirectoryWalker(store, self.inodes, self.reporter)
        self.links = {}  # in-use i-node -> decoded link count

    def run(self, root=ROOT_INODE):
        self.check_truncation()
        FreeListBuilder(self.store, self.tracker, self.reporter).build()
        self.claim_system_area()
        self.scan_inodes()
        self.check_accounting()
        self.walker.walk(root)
        self.check_links()
        return self.reporter.findings

    def check_truncation(self):
        if self.store.truncated:
            self.reporter.finding(f"image truncated: {self.store.words_read} "
                                  f"of {self.geometry.surface_words} words read")

    def claim_system_area(self):
        for block in range(self.geometry.first_data_block):
            self.tracker.claim_used(block, SYSTEM)

    def scan_inodes(self):
        for inum in self.inodes:
            inode = self.inodes.decode(inum, want_blocks=True)
            if inode is None:
                continue
            self.links[inum] = inode.links
            self.reporter.trace(f"i-node {inum}: index blocks "
                                f"{inode.index_blocks}, blocks {inode.blocks}")
            for block in inode.index_blocks + inode.blocks:
                self.tracker.claim_used(block, inum)
            if inode.links == 0:
                self.reporter.finding(f"i-node {inum} has zero link count")

    def check_accounting(self):
        for block in self.tracker.unaccounted():
            self.reporter.finding(f"block {block} neither free nor used")

    def check_links(self):
        """Compare each in-use i-node's link count with the entries naming it."""
        refs = self.walker.refs
        for inum, links in sorted(self.links.items()):
            if refs[inum] == 0:
                self.reporter.finding(f"i-node {inum} in use but not in any directory")
            elif refs[inum] != links:
                self.reporter.finding(f"i-node {inum} has {refs[inum]} links "
                                      f"but link count is {links}")
