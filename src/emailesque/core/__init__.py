# =============================================================================
# Emailesque Core Module
# =============================================================================
# Option handling and message composition. Nothing in here touches the
# network or runs a process; that's the transport package's job.
#
#   - options:   merge, validate and type the options mapping
#   - addresses: parse and normalize address lists
#   - message:   build the ComposedMessage (body, headers, attachments)
# =============================================================================

from emailesque.core.addresses import address_list, parse_addresses, resolve_addresses
from emailesque.core.message import (
    ComposedMessage,
    MessageAttachment,
    compose_message,
)
from emailesque.core.options import (
    BodyType,
    Driver,
    EmailOptions,
    merge_options,
    normalize_attachments,
    validate_options,
)

__all__ = [
    "BodyType",
    "ComposedMessage",
    "Driver",
    "EmailOptions",
    "MessageAttachment",
    "address_list",
    "compose_message",
    "merge_options",
    "normalize_attachments",
    "parse_addresses",
    "resolve_addresses",
    "validate_options",
]
