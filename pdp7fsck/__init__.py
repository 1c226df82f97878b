from .checker import RAW_ROOT_INODE, ROOT_INODE, Checker
from .image import BlockStore, FatalFault, Geometry, WordReader, open_image
from .inode import Inode, InodeTable
from .report import Reporter
from .usage import FreeListBuilder, UsageTracker
from .walker import DirectoryWalker

__version__ = "0.1.0"
