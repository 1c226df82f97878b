"""Raw image access: word decoding and the in-memory block store."""

NUMBLOCKS = 8000        # total blocks on one surface
WORDSPERBLK = 64
LASTFREEBLOCK = 6399    # last block that may appear on the free list
NUMINODEBLKS = 710
FIRSTINODEBLK = 2
INODESIZE = 12          # words
DIRENTSIZE = 8          # words
BYTESPERWORD = 4
WORDBITS = 18
SIGNBIT = 0o400000
MAXINT = 0o777777


class FatalFault(Exception):
    """Addressing metadata too corrupt to keep checking."""


class Geometry:
    def __init__(self, num_blocks=NUMBLOCKS, words_per_block=WORDSPERBLK,
                 last_free_block=LASTFREEBLOCK, num_inode_blocks=NUMINODEBLKS,
                 first_inode_block=FIRSTINODEBLK, inode_size=INODESIZE,
                 dirent_size=DIRENTSIZE, bytes_per_word=BYTESPERWORD):
        self.num_blocks = num_blocks
        self.words_per_block = words_per_block
        self.last_free_block = last_free_block
        self.num_inode_blocks = num_inode_blocks
        self.first_inode_block = first_inode_block
        self.inode_size = inode_size
        self.dirent_size = dirent_size
        self.bytes_per_word = bytes_per_word
        # word width is fixed by the layout
        self.word_bits = WORDBITS
        self.maxint = MAXINT
        self.signbit = SIGNBIT

    @property
    def inodes_per_block(self):
        return self.words_per_block // self.inode_size

    @property
    def first_data_block(self):
        return self.first_inode_block + self.num_inode_blocks

    @property
    def surface_words(self):
        return self.num_blocks * self.words_per_block

    @property
    def surface_bytes(self):
        return self.surface_words * self.bytes_per_word

    def signed(self, word):
        if word & self.signbit:
            return word - (self.maxint + 1)
        return word


class WordReader:
    def __init__(self, stream, bytes_per_word=BYTESPERWORD):
        self.stream = stream
        self.bytes_per_word = bytes_per_word

    def next_word(self):
        """Return the next word, or None once fewer than a word's bytes remain."""
        buf = self.stream.read(self.bytes_per_word)
        if buf is None or len(buf) < self.bytes_per_word:
            return None
        word = 0
        for i, b in enumerate(buf):
            word |= (b & 0o377) << (8 * i)
        return word

    def words(self):
        while True:
            word = self.next_word()
            if word is None:
                return
            yield word


class BlockStore:
    def __init__(self, geometry=None):
        self.geometry = geometry or Geometry()
        self.words = [0] * self.geometry.surface_words
        self.words_read = 0

    @classmethod
    def load(cls, stream, geometry=None):
        store = cls(geometry)
        g = store.geometry
        reader = WordReader(stream, g.bytes_per_word)
        # range first so zip never pulls a word past the surface
        for pos, word in zip(range(g.surface_words), reader.words()):
            store.words[pos] = word & g.maxint
            store.words_read = pos + 1
        return store

    @property
    def truncated(self):
        return self.words_read < self.geometry.surface_words

    def word_at(self, block, offset):
        g = self.geometry
        if not 0 <= block < g.num_blocks or not 0 <= offset < g.words_per_block:
            raise IndexError(f"word ({block}, {offset}) outside the image")
        return self.words[block * g.words_per_block + offset]

    def block(self, block):
        wpb = self.geometry.words_per_block
        if not 0 <= block < self.geometry.num_blocks:
            raise IndexError(f"block {block} outside the image")
        return self.words[block * wpb:(block + 1) * wpb]


def open_image(path, geometry=None):
    """Load the second surface of the image file at path."""
    geometry = geometry or Geometry()
    with open(path, 'rb') as f:
        f.seek(geometry.surface_bytes)
        return BlockStore.load(f, geometry)
