import io
import struct

import pytest

from pdp7fsck.image import BlockStore, Geometry
from pdp7fsck.inode import (DIRECTORY, LARGE, OWNER_READ, OWNER_WRITE, USED,
                            WORLD_READ, InodeTable)
from pdp7fsck.report import Reporter

RW = OWNER_READ | OWNER_WRITE | WORLD_READ
DIR = USED | DIRECTORY | RW
FILE = USED | RW


class ImageBuilder:
    """Assembles a surface word by word, laid out like a real image."""

    def __init__(self, geometry):
        self.geometry = geometry
        self.words = [0] * geometry.surface_words

    def set(self, block, offset, value):
        self.words[block * self.geometry.words_per_block + offset] = value

    def inode(self, inum, flags, pointers=(), uid=0, links=1, size=0, uniq=0,
              stored_links=None):
        g = self.geometry
        block = g.first_inode_block + inum // g.inodes_per_block
        base = g.inode_size * (inum % g.inodes_per_block)
        if stored_links is None:
            stored_links = (g.maxint - links + 1) & g.maxint
        fields = [flags] + list(pointers) + [0] * (7 - len(pointers))
        fields += [uid, stored_links, size, uniq]
        for i, value in enumerate(fields):
            self.set(block, base + i, value)

    def dirent(self, block, slot, inum, name, uniq=0):
        base = slot * self.geometry.dirent_size
        name = name.ljust(8)
        self.set(block, base, inum)
        for i in range(4):
            self.set(block, base + 1 + i,
                     (ord(name[2 * i]) << 9) | ord(name[2 * i + 1]))
        self.set(block, base + 5, uniq)

    def free_list(self, numbers):
        """Chain the numbers; each chain block is taken from the numbers."""
        numbers = list(numbers)
        prev = 0
        while numbers:
            chain = numbers.pop(0)
            self.set(prev, 0, chain)
            entries, numbers = numbers[:9], numbers[9:]
            for pos, block in enumerate(entries, start=1):
                self.set(chain, pos, block)
            prev = chain

    def surface(self):
        return struct.pack(f"<{len(self.words)}I", *self.words)

    def image(self):
        return bytes(self.geometry.surface_bytes) + self.surface()

    def store(self):
        return BlockStore.load(io.BytesIO(self.surface()), self.geometry)


@pytest.fixture
def geometry():
    return Geometry(num_blocks=128, last_free_block=127, num_inode_blocks=4)


@pytest.fixture
def builder(geometry):
    return ImageBuilder(geometry)


@pytest.fixture
def reporter():
    return Reporter(out=io.StringIO(), err=io.StringIO())


@pytest.fixture
def valid(builder):
    """A small consistent filesystem.

    /      i-node 4, block 6
    /sub   i-node 5, block 7
    /file  i-node 9, blocks 8 9
    /big   i-node 10, index block 10 -> blocks 11 12 13
    /sub/note  i-node 11, block 14
    everything from block 15 on is free
    """
    b = builder
    b.inode(4, DIR, [6], links=3, size=40)
    b.dirent(6, 0, 4, ".")
    b.dirent(6, 1, 4, "..")
    b.dirent(6, 2, 5, "sub")
    b.dirent(6, 3, 9, "file")
    b.dirent(6, 4, 10, "big")
    b.inode(5, DIR, [7], links=2, size=24)
    b.dirent(7, 0, 5, ".")
    b.dirent(7, 1, 4, "..")
    b.dirent(7, 2, 11, "note")
    b.inode(9, FILE, [8, 9], uid=12, size=100)
    b.inode(10, FILE | LARGE, [10], size=150)
    for pos, block in enumerate([11, 12, 13]):
        b.set(10, pos, block)
    b.inode(11, FILE, [14], size=7)
    b.free_list(range(15, 128))
    return b


@pytest.fixture
def inodes(valid):
    return InodeTable(valid.store())
