import sys


class Reporter:
    """Collects output lines in discovery order and echoes them.

    findings holds only the anomalies; lines holds everything printed,
    including directory listings and separators.
    """

    def __init__(self, out=None, debug=False, err=None):
        self.out = out if out is not None else sys.stdout
        self.err = err if err is not None else sys.stderr
        self.debug = debug
        self.lines = []
        self.findings = []

    def line(self, text=""):
        self.lines.append(text)
        print(text, file=self.out)

    def finding(self, text):
        self.findings.append(text)
        self.line(text)

    def trace(self, text):
        if self.debug:
            print(text, file=self.err)


def format_entry(inode, path):
    return (f"{inode.inum:5d} {inode.mode} {inode.links:3d} "
            f"{inode.uid:4d} {inode.size:6d} {path}")
