# src/wormy/modules/__init__.py
"""
Wormy platform modules.

Each module is independent and owns its own state:
  - pitstop: daily-capped pit stops paying a fixed reward
  - fuel: daily-capped fuel claims
  - race: daily-capped races scoring seasonal and lifetime points
  - faucet: once-a-day randomized token faucet
  - daily_game: check-ins (with streaks), votes, cheers, predictions
  - vesting: linear vesting schedules with one-time revoke
"""
