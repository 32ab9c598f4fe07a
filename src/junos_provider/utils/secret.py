"""Junos ``$9$`` reversible secret encoding.

Junos stores some passwords (archive sites, RADIUS/TACACS secrets, ...)
obfuscated with the ``$9$`` scheme. Configuration read back from a device
therefore needs decoding before it can be compared with what the user
declared.
"""
import secrets

MAGIC = "$9$"

FAMILY = [
    "QzF3n6/9CAtpu0O",
    "B1IREhcSyrleKvMW8LXx",
    "7N-dVbwsY2g4oaJZGUDj",
    "iHkq.mPf5T",
]

# Number of random characters following the salt, keyed by salt character
EXTRA = {char: 3 - index for index, family in enumerate(FAMILY) for char in family}

NUM_ALPHA = "".join(FAMILY)
ALPHA_NUM = {char: index for index, char in enumerate(NUM_ALPHA)}

ENCODING = [
    [1, 4, 32],
    [1, 16, 32],
    [1, 8, 32],
    [1, 64],
    [1, 32],
    [1, 4, 16, 128],
    [1, 32, 64],
]


class SecretDecodeError(ValueError):
    """Malformed ``$9$`` secret."""
    pass


def _nibble(chars: str, length: int) -> tuple[str, str]:
    nib, rest = chars[:length], chars[length:]
    if len(nib) != length:
        raise SecretDecodeError(
            f"ran out of characters: hit '{nib}', expecting {length} chars"
        )
    return nib, rest


def _gap(first: str, second: str) -> int:
    try:
        return (ALPHA_NUM[second] - ALPHA_NUM[first]) % len(NUM_ALPHA) - 1
    except KeyError as e:
        raise SecretDecodeError(f"invalid character {e} in secret") from e


def decode_secret(value: str) -> str:
    """Decode a ``$9$`` secret.

    Values without the ``$9$`` prefix are returned unchanged.

    Raises:
        SecretDecodeError: If the encoded value is truncated or contains
            characters outside the ``$9$`` alphabet
    """
    if not value.startswith(MAGIC):
        return value

    chars = value[len(MAGIC):]
    first, chars = _nibble(chars, 1)
    if first not in EXTRA:
        raise SecretDecodeError(f"invalid salt character '{first}' in secret")
    _, chars = _nibble(chars, EXTRA[first])

    prev = first
    decoded = ""
    while chars:
        decode = ENCODING[len(decoded) % len(ENCODING)]
        nibble, chars = _nibble(chars, len(decode))
        gaps = []
        for char in nibble:
            gaps.append(_gap(prev, char))
            prev = char
        decoded += chr(sum(g * d for g, d in zip(gaps, decode)) % 256)
    return decoded


def _random_chars(count: int) -> str:
    return "".join(secrets.choice(NUM_ALPHA) for _ in range(count))


def encode_secret(plaintext: str, salt: str = "") -> str:
    """Encode ``plaintext`` as a ``$9$`` secret.

    Args:
        plaintext: Value to obfuscate
        salt: Optional salt character from the ``$9$`` alphabet, random if empty
    """
    salt = salt or _random_chars(1)
    if salt not in EXTRA:
        raise ValueError(f"invalid salt character '{salt}'")

    encoded = MAGIC + salt + _random_chars(EXTRA[salt])
    prev = salt
    for position, char in enumerate(plaintext):
        encode = ENCODING[position % len(ENCODING)]
        remainder = ord(char)
        gaps = []
        for mod in reversed(encode):
            gaps.insert(0, remainder // mod)
            remainder %= mod
        for gap in gaps:
            prev = NUM_ALPHA[(ALPHA_NUM[prev] + gap + 1) % len(NUM_ALPHA)]
            encoded += prev
    return encoded
