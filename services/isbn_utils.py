"""
ISBN normalisation for lookups and storage

Every identifier is carried around in one canonical 13-digit form. Input may
contain hyphens, spaces or an "ISBN:" prefix; only digits and the check
letter X survive the filter.

For isbn related info, see https://isbn-information.com/
"""
import re

ISBN13_CHECKS = [1, 3, 1, 3, 1, 3, 1, 3, 1, 3, 1, 3]
ISBN13_PREFIX = "978"

_NOT_DIGIT_OR_X = re.compile(r"[^0-9Xx]")


def only_digits_x(raw: str) -> str:
    return _NOT_DIGIT_OR_X.sub("", raw or "").upper()


def isbn13_check_digit(first12: str) -> str:
    """
    Check digit for the first 12 digits of an ISBN 13

    Parameters
    ----------
    first12 : str
        Twelve characters, normally digits

    Returns
    -------
    str
        The single check digit, "0" through "9"

    """
    # each character counts as its offset from "0", so X weighs in as 40
    total = sum(a * (ord(b) - ord("0")) for (a, b) in zip(ISBN13_CHECKS, first12))
    return str((10 - total % 10) % 10)


def to_isbn13(isbn10: str) -> str:
    """
    Converts a filtered 10 character ISBN to 13 digits

    The ISBN 10 check character is discarded and a new ISBN 13 check digit
    is computed over "978" + the first nine characters.
    """
    core = ISBN13_PREFIX + isbn10[:9]
    return core + isbn13_check_digit(core)


def normalize(raw: str) -> str:
    """
    Canonical 13 digit form of `raw`, or "" when it cannot be one

    Parameters
    ----------
    raw : str
        User or file input, e.g. "0-306-40615-2"

    Returns
    -------
    str
        13 characters, or an empty string for invalid input.
        A 13 character candidate is returned as-is; its checksum is not
        verified. A 10 character candidate is always converted, even with an
        X in its first nine places; its check character is replaced.

    """
    filtered = only_digits_x(raw)
    if len(filtered) == 13:
        return filtered
    if len(filtered) == 10:
        return to_isbn13(filtered)
    return ""
