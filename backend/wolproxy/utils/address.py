"""EUI-48 / EUI-64 physical address codec.

Accepted notations (both widths, either letter case):

    0123456789AB            compact
    01-23-45-67-89-AB       dashed (default output)
    01:23:45:67:89:AB       colon
    01.23.45.67.89.AB       dotted

Parsing is strict: one separator character per address, one letter case per
address (digits are case-neutral).
"""

from __future__ import annotations

from enum import Enum

BUFFER_SIZE = 8

# text length -> (byte count, separated)
_LAYOUTS: dict[int, tuple[int, bool]] = {
    12: (6, False),
    17: (6, True),
    16: (8, False),
    23: (8, True),
}
_SEPARATORS = frozenset(":-.")


class InvalidAddressFormat(ValueError):
    """Text is not a valid EUI-48 / EUI-64 address."""


class InvalidFormatSpecifier(ValueError):
    """Format specifier is not one of M, D, C, X (either case)."""


class AddressFamily(str, Enum):
    EUI48 = "eui48"
    EUI64 = "eui64"

    @property
    def length(self) -> int:
        return 6 if self is AddressFamily.EUI48 else 8


class FormatStyle(Enum):
    COMPACT = ("M", "")
    DASHED = ("D", "-")
    COLON = ("C", ":")
    DOTTED = ("X", ".")

    def __init__(self, code: str, separator: str):
        self.code = code
        self.separator = separator

    @classmethod
    def from_code(cls, code: str) -> FormatStyle | None:
        for style in cls:
            if style.code == code:
                return style
        return None


class _LetterCase(Enum):
    UNDETERMINED = 0
    EXPECT_UPPER = 1
    EXPECT_LOWER = 2


def parse_format_spec(spec: str) -> tuple[FormatStyle, bool]:
    """Return (style, uppercase) for a format specifier."""
    if not spec:
        return FormatStyle.DASHED, True
    if len(spec) != 1:
        raise InvalidFormatSpecifier("Format specifier was invalid.")
    style = FormatStyle.from_code(spec.upper())
    if style is None:
        raise InvalidFormatSpecifier("Format specifier was invalid.")
    return style, spec.isupper()


def _hex_value(char: str, case: _LetterCase) -> tuple[int, _LetterCase] | None:
    if "0" <= char <= "9":
        return ord(char) - ord("0"), case
    if "A" <= char <= "F":
        if case is _LetterCase.EXPECT_LOWER:
            return None
        return ord(char) - ord("A") + 10, _LetterCase.EXPECT_UPPER
    if "a" <= char <= "f":
        if case is _LetterCase.EXPECT_UPPER:
            return None
        return ord(char) - ord("a") + 10, _LetterCase.EXPECT_LOWER
    return None


class PhysicalAddress:
    """Immutable EUI-48 or EUI-64 address.

    Stored as a fixed 8-byte buffer plus the family; ``address`` exposes the
    6 or 8 significant bytes.
    """

    __slots__ = ("_buffer", "_family")

    def __init__(self, data: bytes | bytearray | memoryview):
        data = bytes(data)
        if len(data) not in (6, 8):
            raise ValueError("MAC address must be either EUI-48 or EUI-64.")
        object.__setattr__(self, "_buffer", data.ljust(BUFFER_SIZE, b"\x00"))
        object.__setattr__(
            self, "_family", AddressFamily.EUI48 if len(data) == 6 else AddressFamily.EUI64
        )

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    @property
    def family(self) -> AddressFamily:
        return self._family

    @property
    def length(self) -> int:
        return self._family.length

    @property
    def address(self) -> bytes:
        return self._buffer[: self.length]

    # --- parsing ---------------------------------------------------------

    @classmethod
    def try_parse(cls, text: str) -> PhysicalAddress | None:
        """Parse ``text``; return None if it is not a valid address."""
        if not isinstance(text, str):
            return None
        layout = _LAYOUTS.get(len(text))
        if layout is None:
            return None
        _, separated = layout

        separator: str | None = None
        case = _LetterCase.UNDETERMINED
        data = bytearray()
        index = 0

        while index < len(text):
            if separated and index:
                char = text[index]
                index += 1
                if separator is None:
                    if char not in _SEPARATORS:
                        return None
                    separator = char
                elif char != separator:
                    return None

            high = _hex_value(text[index], case)
            if high is None:
                return None
            high_nibble, case = high
            low = _hex_value(text[index + 1], case)
            if low is None:
                return None
            low_nibble, case = low
            index += 2

            data.append((high_nibble << 4) | low_nibble)

        return cls(data)

    @classmethod
    def parse(cls, text: str) -> PhysicalAddress:
        """Parse ``text`` or raise InvalidAddressFormat."""
        result = cls.try_parse(text)
        if result is None:
            raise InvalidAddressFormat(f"Invalid MAC address: {text!r}")
        return result

    # --- formatting ------------------------------------------------------

    def formatted_length(self, spec: str = "") -> int:
        style, _ = parse_format_spec(spec)
        if style is FormatStyle.COMPACT:
            return self.length * 2
        return self.length * 3 - 1

    def format(self, spec: str = "") -> str:
        style, uppercase = parse_format_spec(spec)
        pattern = "{:02X}" if uppercase else "{:02x}"
        return style.separator.join(pattern.format(b) for b in self.address)

    def try_format(self, destination: bytearray | memoryview, spec: str = "") -> tuple[bool, int]:
        """Write the ASCII text form into ``destination``.

        Returns ``(False, 0)`` without touching the buffer when the specifier
        is invalid or the buffer is too small, else ``(True, bytes_written)``.
        """
        try:
            length = self.formatted_length(spec)
        except InvalidFormatSpecifier:
            return False, 0
        if len(destination) < length:
            return False, 0
        destination[:length] = self.format(spec).encode("ascii")
        return True, length

    def __format__(self, spec: str) -> str:
        return self.format(spec)

    def __str__(self) -> str:
        return self.format()

    def __repr__(self) -> str:
        return f"PhysicalAddress('{self.format()}')"

    # --- equality --------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PhysicalAddress):
            return NotImplemented
        return self._family is other._family and self.address == other.address

    def __hash__(self) -> int:
        return hash((self._family, self.address))

    def __reduce__(self):
        return (type(self), (self.address,))
