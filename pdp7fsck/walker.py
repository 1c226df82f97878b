import collections, enum

from .inode import DIRECTORY
from .report import format_entry

NAME_WORDS = 4
NAME_POS = 1
UNIQ_POS = 5


class DirState(enum.Enum):
    UNVISITED = 0
    QUEUED = 1
    DONE = 2


class DirEntry:
    def __init__(self, inum, name, uniq):
        self.inum = inum
        self.name = name
        self.uniq = uniq

    def __repr__(self):
        return f"DirEntry({self.inum}, {self.name!r})"


def decode_name(words):
    """Unpack two 9-bit characters per word and drop trailing spaces."""
    chars = []
    for w in words:
        chars.append(chr((w >> 9) & 0o777))
        chars.append(chr(w & 0o177))
    return ''.join(chars).rstrip(' ')


def dir_entries(store, block):
    """Yield the non-empty entries of one directory data block."""
    g = store.geometry
    for slot in range(0, g.words_per_block - g.dirent_size + 1, g.dirent_size):
        inum = store.word_at(block, slot)
        if inum == 0:
            continue
        name = decode_name(store.word_at(block, slot + NAME_POS + i)
                           for i in range(NAME_WORDS))
        yield DirEntry(inum, name, store.word_at(block, slot + UNIQ_POS))


class DirectoryWalker:
    """Depth-first walk of the directory graph from a root inode.

    Each directory is listed once, however many names it has or whatever
    cycles the entries form. Pending visits live on an explicit stack.
    """

    def __init__(self, store, inodes, reporter):
        self.store = store
        self.inodes = inodes
        self.reporter = reporter
        self.state = {}
        # i-node number -> number of directory entries naming it
        self.refs = collections.Counter()

    def is_done(self, inum):
        return self.state.get(inum, DirState.UNVISITED) is DirState.DONE

    def walk(self, root, prefix=""):
        stack = [(root, prefix)]
        while stack:
            inum, path = stack.pop()
            if self.is_done(inum):
                continue
            children = self.visit(inum, path)
            stack.extend(reversed(children))

    def visit(self, inum, path):
        """List one directory; return the subdirectories it queued."""
        shown = path or "/"
        inode = self.inodes.decode(inum, want_blocks=True)
        if inode is None:
            self.reporter.finding(f"directory {shown} has empty i-node {inum}")
            return []
        if not inode.is_dir:
            self.reporter.finding(f"{shown} (i-node {inum}) is not a directory")
            return []
        self.state[inum] = DirState.DONE
        self.reporter.trace(f"visiting directory {shown} (i-node {inum}), "
                            f"blocks {inode.blocks}")

        self.reporter.line(f"{shown}:")
        children = []
        for block in inode.blocks:
            for entry in dir_entries(self.store, block):
                child = f"{path}/{entry.name}"
                if not self.entry_status(entry, child):
                    continue
                if (self.inodes.is_inode(entry.inum, DIRECTORY)
                        and not self.is_done(entry.inum)):
                    self.state[entry.inum] = DirState.QUEUED
                    children.append((entry.inum, child))
        self.reporter.line()
        return children

    def entry_status(self, entry, path):
        """Report one entry; False when its inode cannot be followed."""
        report = self.reporter
        if not self.inodes.in_range(entry.inum):
            report.finding(f"bad i-node {entry.inum} in this dir named {path}")
            return False
        self.refs[entry.inum] += 1
        report.trace(f"entry {path}: i-node {entry.inum} uniq {entry.uniq}")
        inode = self.inodes.decode(entry.inum)
        if inode is None:
            report.finding(f"unallocated i-node in this dir named {path}")
            return False
        report.line(format_entry(inode, path))
        if entry.name == "":
            report.finding(f"EMPTY FILENAME {path} (i-node {entry.inum})")
        return True
