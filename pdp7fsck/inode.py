from .image import FatalFault

# flag bits in word 0 of an inode
USED = 0o400000
LARGE = 0o200000
SPECIAL = 0o000040
DIRECTORY = 0o000020
OWNER_READ = 0o000010
OWNER_WRITE = 0o000004
WORLD_READ = 0o000002
WORLD_WRITE = 0o000001

# word offsets within an inode
FLAGS_POS = 0
PTR_POS = 1
NUM_PTRS = 7
UID_POS = 8
LINKS_POS = 9
SIZE_POS = 10
UNIQ_POS = 11


class Inode:
    """Decoded view of one in-use inode. Never written back."""

    def __init__(self, inum, flags, pointers, uid, links, size, uniq,
                 blocks=None, index_blocks=None):
        self.inum = inum
        self.flags = flags
        self.pointers = pointers
        self.uid = uid
        self.links = links
        self.size = size
        self.uniq = uniq
        self.blocks = blocks if blocks is not None else []
        self.index_blocks = index_blocks if index_blocks is not None else []

    @property
    def is_large(self):
        return bool(self.flags & LARGE)

    @property
    def is_special(self):
        return bool(self.flags & SPECIAL)

    @property
    def is_dir(self):
        return bool(self.flags & DIRECTORY)

    @property
    def mode(self):
        """Five character permission string, e.g. 'drwr-'."""
        if self.is_large:
            kind = 'l'
        elif self.is_special:
            kind = 'i'
        elif self.is_dir:
            kind = 'd'
        else:
            kind = '-'
        return kind + ''.join(
            ch if self.flags & bit else '-'
            for bit, ch in ((OWNER_READ, 'r'), (OWNER_WRITE, 'w'),
                            (WORLD_READ, 'r'), (WORLD_WRITE, 'w')))

    def __eq__(self, other):
        if not isinstance(other, Inode):
            return NotImplemented
        return vars(self) == vars(other)

    def __repr__(self):
        return (f"Inode({self.inum}, {self.mode}, links={self.links}, "
                f"uid={self.uid}, size={self.size}, blocks={self.blocks})")


class InodeTable:
    def __init__(self, store):
        self.store = store
        self.geometry = store.geometry

    @property
    def num_inodes(self):
        return self.geometry.num_inode_blocks * self.geometry.inodes_per_block

    def __iter__(self):
        return iter(range(self.num_inodes))

    def in_range(self, inum):
        return 0 <= inum < self.num_inodes

    def locate(self, inum):
        g = self.geometry
        block = g.first_inode_block + inum // g.inodes_per_block
        offset = g.inode_size * (inum % g.inodes_per_block)
        return block, offset

    def flags(self, inum):
        block, offset = self.locate(inum)
        return self.store.word_at(block, offset + FLAGS_POS)

    def is_inode(self, inum, mask):
        flags = self.flags(inum)
        if not flags & USED:
            flags = 0
        return bool(flags & mask)

    def decode(self, inum, want_blocks=False):
        """Return an Inode for inum, or None if its used bit is clear.

        With want_blocks the data block list is resolved, going through the
        index blocks of a large file. A pointer outside the image raises
        FatalFault.
        """
        g = self.geometry
        block, offset = self.locate(inum)
        word = lambda pos: self.store.word_at(block, offset + pos)

        flags = word(FLAGS_POS)
        if not flags & USED:
            return None
        pointers = [word(PTR_POS + i) for i in range(NUM_PTRS)]
        inode = Inode(inum, flags, pointers,
                      uid=g.signed(word(UID_POS)),
                      links=(g.maxint - word(LINKS_POS) + 1) & g.maxint,
                      size=word(SIZE_POS),
                      uniq=word(UNIQ_POS))
        if not want_blocks:
            return inode

        for ptr in pointers:
            if ptr == 0:
                continue
            self._check_pointer(inum, ptr)
            if not inode.is_large:
                inode.blocks.append(ptr)
                continue
            inode.index_blocks.append(ptr)
            for data in self.store.block(ptr):
                if data != 0:
                    self._check_pointer(inum, data)
                    inode.blocks.append(data)
        return inode

    def _check_pointer(self, inum, ptr):
        if ptr >= self.geometry.num_blocks:
            raise FatalFault(f"i-node {inum} has block pointer {ptr} "
                             f"beyond block {self.geometry.num_blocks - 1}")
