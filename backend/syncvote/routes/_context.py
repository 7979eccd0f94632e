from __future__ import annotations

from flask import current_app

from ..voting.service import Outcome, VotingCoordinator


def coordinator() -> VotingCoordinator:
    return current_app.extensions["syncvote"]


def notify_room(room_id: str, with_results: bool = False) -> None:
    notifier = current_app.extensions.get("syncvote.notifier")
    if notifier is not None:
        notifier(room_id, with_results)


def outcome_status(outcome: Outcome) -> int:
    if outcome is Outcome.OK:
        return 200
    if outcome is Outcome.NOT_FOUND:
        return 404
    return 400
