"""Generation of numeric one-time codes."""

import secrets


def generate(length: int = 6) -> str:
    """
    Generate a numeric code of exactly ``length`` digits.

    The value is drawn uniformly from ``[10**(length-1), 10**length - 1]``, so
    the code never starts with a zero.

    Parameters
    ----------
    length : int

    Returns
    -------
    str

    """
    if length < 1:
        raise ValueError('Code length must be at least 1')
    low = 10 ** (length - 1)
    high = 10 ** length - 1
    return str(low + secrets.randbelow(high - low + 1))
