"""Exceptions raised by the entropy-coding core."""


class CodecError(ValueError):
    """Base class for all codec failures."""


class MalformedBitstreamError(CodecError, EOFError):
    """A decoder ran out of bits (or met an invalid code) mid-field."""

    def __init__(self, offset: int, field: str, expected: int, available: int,
                 message: str = None):
        self.offset = offset
        self.field = field
        self.expected = expected
        self.available = available
        if message is None:
            message = (f"Insufficient bits for {field} at bit offset {offset} "
                       f"(byte {offset // 8}): expected {expected}, "
                       f"available {available}")
        super().__init__(message)


class EmptyInputError(CodecError):
    """Statistic requested over zero symbols."""


class UnknownSymbolError(CodecError, KeyError):
    """Symbol missing from the code table used for encoding."""

    def __init__(self, symbol, position: int = None):
        self.symbol = symbol
        self.position = position
        where = f" at position {position}" if position is not None else ""
        super().__init__(f"Symbol {symbol!r}{where} is not in the code table")

    def __str__(self):
        # KeyError would otherwise repr() the message
        return self.args[0]


class DegenerateAlphabetError(CodecError):
    """Invalid code for a single-symbol alphabet."""


class ImageMismatchError(CodecError):
    """Two images differ in shape or in at least one pixel."""

    def __init__(self, message: str, position=None, expected=None, actual=None):
        self.position = position
        self.expected = expected
        self.actual = actual
        super().__init__(message)
