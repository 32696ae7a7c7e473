"""Crowdsourced consensus layer.

``policy`` decides, ``engine`` reads and writes the store around it.
"""

from codicibot.consensus.engine import ConsensusEngine
from codicibot.consensus.policy import Decision, decide, normalize_code

__all__ = ["ConsensusEngine", "Decision", "decide", "normalize_code"]
