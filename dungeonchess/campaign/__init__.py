"""Campaign flow: floors, turns, and the shop."""

from dungeonchess.campaign.session import Campaign, Phase, RosterEntry

__all__ = ["Campaign", "Phase", "RosterEntry"]
