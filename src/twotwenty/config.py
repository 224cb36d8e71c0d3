"""
Rules configuration for a 220 round.

Defaults follow the usual house rules: bidding opens at 60,
moves in steps of 20 and tops out at 220 (the whole deck). The placeholder bot
stops raising at 200.
"""
from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict


@dataclass(frozen=True)
class RulesConfig:
    """Tunable rule constants. Frozen so a single instance can be shared."""

    num_seats: int = 4
    hand_size: int = 8
    floor_bid: int = 60
    bid_step: int = 20
    max_bid: int = 220

    # Automated seats
    bot_delay: float = 1.0  # seconds between a bot getting the turn and acting
    bot_bid_ceiling: int = 200
    bot_bid_threshold: int = 20  # hand points a bot needs before it raises

    def validate(self) -> "RulesConfig":
        """Raise ValueError if the values cannot describe a 32-card, 4-seat round."""
        if self.num_seats != 4:
            raise ValueError(f"220 is played by 4 seats, got {self.num_seats}")
        if self.hand_size * self.num_seats != 32:
            raise ValueError(
                f"hand_size {self.hand_size} x {self.num_seats} seats does not deal 32 cards"
            )
        if self.bid_step <= 0:
            raise ValueError(f"bid_step must be positive, got {self.bid_step}")
        if self.floor_bid < 0 or self.floor_bid >= self.max_bid:
            raise ValueError(
                f"floor_bid must be in [0, max_bid), got {self.floor_bid} (max {self.max_bid})"
            )
        if self.bot_delay < 0:
            raise ValueError(f"bot_delay must be >= 0, got {self.bot_delay}")
        return self

    def bid_levels(self) -> list[int]:
        """Every bid a seat can ever announce: floor + step, ... up to max_bid."""
        return list(range(self.floor_bid + self.bid_step, self.max_bid + 1, self.bid_step))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "RulesConfig":
        defaults = cls()
        return cls(
            num_seats=int(d.get("num_seats", defaults.num_seats)),
            hand_size=int(d.get("hand_size", defaults.hand_size)),
            floor_bid=int(d.get("floor_bid", defaults.floor_bid)),
            bid_step=int(d.get("bid_step", defaults.bid_step)),
            max_bid=int(d.get("max_bid", defaults.max_bid)),
            bot_delay=float(d.get("bot_delay", defaults.bot_delay)),
            bot_bid_ceiling=int(d.get("bot_bid_ceiling", defaults.bot_bid_ceiling)),
            bot_bid_threshold=int(d.get("bot_bid_threshold", defaults.bot_bid_threshold)),
        ).validate()


DEFAULT_CONFIG = RulesConfig()


def save_config(cfg: RulesConfig, path: str | Path) -> Path:
    """Write ``cfg`` as pretty JSON and return the path written."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(cfg.to_dict(), f, indent=2)
    return path


def load_config(path: str | Path) -> RulesConfig:
    """Read a JSON rules file. Missing keys keep their defaults."""
    path = Path(path)
    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a JSON object, got {type(data).__name__}")
    return RulesConfig.from_dict(data)


__all__ = ["RulesConfig", "DEFAULT_CONFIG", "save_config", "load_config"]
