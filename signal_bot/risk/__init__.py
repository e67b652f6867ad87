"""Risk: stop-loss and take-profit levels."""

from signal_bot.risk.levels import RiskLevels, risk_reward_ratio

__all__ = ["RiskLevels", "risk_reward_ratio"]
