from typing import List, Sequence

OFF = "0"
ON = "1"


class ChannelStateVector:
    """
    In-memory mirror of the symbol on every channel of a device, one character per
    channel. Grows with ``OFF`` to cover the highest channel touched so far and never
    shrinks.
    """
    def __init__(self):
        self._symbols: List[str] = []

    def __len__(self) -> int:
        return len(self._symbols)

    def __str__(self) -> str:
        return "".join(self._symbols)

    def __repr__(self) -> str:
        return f"ChannelStateVector({str(self)!r})"

    def __getitem__(self, position: int) -> str:
        self.grow(position + 1)
        return self._symbols[position]

    def grow(self, length: int) -> None:
        if len(self._symbols) < length:
            self._symbols.extend(OFF * (length - len(self._symbols)))

    def block(self, start: int, count: int) -> str:
        self.grow(start + count)
        return "".join(self._symbols[start:start + count])

    def replace(self, start: int, symbols: Sequence[str]) -> bool:
        """
        Overwrite the channels starting at ``start``.

        :return: False if the channels already held these symbols, in which case
                nothing was changed
        """
        if self.block(start, len(symbols)) == "".join(symbols):
            return False
        self._symbols[start:start + len(symbols)] = symbols
        return True
