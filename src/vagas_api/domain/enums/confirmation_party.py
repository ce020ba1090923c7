from enum import StrEnum


class ConfirmationParty(StrEnum):
    """Side of the arrival/departure handshake."""

    OWNER = "owner"
    USER = "user"
