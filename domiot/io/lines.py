import codecs
import re
from typing import List

LINE_SEPARATOR = re.compile(r"\r\n|\r|\n")


class LineReassembler:
    """
    Streaming line splitter for device reads. Chunks do not need to contain whole
    lines: the trailing partial segment of each chunk is kept and prefixed to the next
    one. A multi-byte UTF-8 character split across chunks is decoded once both halves
    have arrived, and a ``\\r\\n`` split across chunks is a single terminator.
    """

    def __init__(self, encoding: str = "utf-8"):
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._buffer = ""
        self._after_cr = False

    @property
    def pending(self) -> str:
        return self._buffer

    def feed(self, chunk: bytes) -> List[str]:
        text = self._decoder.decode(chunk)
        if len(text) == 0:
            return []
        if self._after_cr and text[0] == "\n":
            # Second half of a "\r\n" whose line was already returned
            text = text[1:]
        self._buffer += text
        self._after_cr = self._buffer.endswith("\r")
        lines = LINE_SEPARATOR.split(self._buffer)
        self._buffer = lines.pop()
        return lines
