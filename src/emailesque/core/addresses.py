# =============================================================================
# Address Resolution
# =============================================================================
# Parses comma-separated address lists ("Jane <jane@example.com>, bob@x.org")
# into normalized, comma-joined strings. The actual RFC 5322 parsing is done
# by email.utils.getaddresses; we only re-join the results in parse order.
# =============================================================================

from email.utils import formataddr, getaddresses

from emailesque.exceptions import AddressParseFailure


def parse_addresses(value: str, field: str = "to") -> list[tuple[str, str]]:
    """
    Parse an address list into (display name, address) pairs.

    Args:
        value: Comma-separated address list.
        field: Option name, used in the error message.

    Returns:
        Parsed pairs in the order they appeared.

    Raises:
        AddressParseFailure: If nothing parses, or an entry has no address.
    """
    pairs = getaddresses([value])
    if not pairs or any(not address for _, address in pairs):
        raise AddressParseFailure(field, value)
    return pairs


def resolve_addresses(value: str | None, field: str = "to") -> str | None:
    """
    Normalize an address list option.

    Example:
        >>> resolve_addresses("a@x.com,  Bob <b@y.com>")
        'a@x.com,Bob <b@y.com>'

    Returns:
        The formatted addresses joined with ",", or None if value is empty.
    """
    if not value:
        return None
    return ",".join(formataddr(pair) for pair in parse_addresses(value, field))


def address_list(value: str | None) -> list[str]:
    """Return the bare addresses (no display names) in a resolved list."""
    if not value:
        return []
    return [address for _, address in getaddresses([value]) if address]
