class LicenseError(Exception):
    """Base class for every license input error."""

class InvalidLengthError(LicenseError):
    def __init__(self, expected: int, actual: int):
        super().__init__(f"invalid license length: expected {expected} bytes, got {actual}")
        self.expected = expected
        self.actual = actual

class InvalidSeedLengthError(LicenseError):
    def __init__(self, expected: int, actual: int):
        super().__init__(f"seed length is invalid: expected {expected} bytes, got {actual}")
        self.expected = expected
        self.actual = actual

class HumanReadableParseError(LicenseError):
    """A dashed text key could not be turned into a License."""

class Base64DecodeError(HumanReadableParseError):
    pass

class LicenseBytesError(HumanReadableParseError):
    """The text decoded fine but the bytes do not fit the license layout.

    The underlying ``InvalidLengthError`` is available as ``__cause__``.
    """
