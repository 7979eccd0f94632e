"""Exceptions shared by the engine, its collaborators and the HTTP layer.

Expected failures of room operations are reported through ``Outcome``
values, not exceptions. These classes cover malformed input and
collaborator failures.
"""


class SyncVoteError(Exception):
    """Base class for all SyncVote errors."""


class InvalidPayload(SyncVoteError):
    """Request body or query could not be validated."""

    def __init__(self, code: str = "invalid_payload"):
        self.code = code
        super().__init__(code)


class Unauthenticated(SyncVoteError):
    """No user id could be resolved from the request."""


class ItemLookupError(SyncVoteError):
    """The item directory failed to resolve an item."""

    def __init__(self, item_id: str, reason: str = ""):
        self.item_id = item_id
        super().__init__(f"Lookup of item {item_id} failed{': ' + reason if reason else ''}")


class PlaybackHandoffError(SyncVoteError):
    """The playback group rejected or failed an enqueue request."""

    def __init__(self, group_ref: str, reason: str = ""):
        self.group_ref = group_ref
        super().__init__(f"Playback handoff to group {group_ref} failed{': ' + reason if reason else ''}")
