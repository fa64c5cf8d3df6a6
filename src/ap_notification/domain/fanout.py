"""Recipient planning for a single accepted bid — pure, no I/O.

Rules:
  - the asset owner receives one NEW_BID, unless the owner placed the bid;
  - every distinct earlier accepted bidder receives one OUTBID, except the
    new bidder and the owner (already notified above);
  - the previous highest bidder is always part of the outbid set, even if the
    ledger snapshot missed them.

Targets are deduplicated by recipient id and returned sorted so the plan is
deterministic for a given ledger snapshot.
"""

from collections.abc import Iterable

from src.ap_common.enums import NotificationType
from src.ap_common.money import format_amount
from src.ap_notification.domain.models import FanOutTarget


def plan_fan_out(
    owner_id: str | None,
    bidder_id: str,
    previous_highest_bidder_id: str | None,
    prior_bidders: Iterable[str],
) -> list[FanOutTarget]:
    targets: list[FanOutTarget] = []
    if owner_id and owner_id != bidder_id:
        targets.append(FanOutTarget(owner_id, NotificationType.NEW_BID))

    outbid = set(prior_bidders)
    if previous_highest_bidder_id:
        outbid.add(previous_highest_bidder_id)
    outbid.discard(bidder_id)
    if owner_id:
        outbid.discard(owner_id)

    targets.extend(FanOutTarget(r, NotificationType.OUTBID) for r in sorted(outbid))
    return targets


def render_message(kind: NotificationType, amount: int, asset_title: str | None) -> str:
    if kind == NotificationType.NEW_BID:
        return f"New bid of {format_amount(amount)} placed on {asset_title or 'your asset'}"
    return (
        f"You've been outbid on {asset_title or 'an asset'}. "
        f"New bid: {format_amount(amount)}"
    )
