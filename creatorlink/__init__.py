"""
CreatorLink — Purchase-to-Community Reward Bridge for Discord
==============================================================
Greets new community members, binds verified purchaser emails to Discord
members, awards XP when a mapped purchaser completes an order, and keeps a
single pinned leaderboard message up to date.

Package layout::

    creatorlink/
    ├── __main__.py        # One process: discord.py client + uvicorn API
    ├── config.py          # YAML + env → typed Python config
    ├── constants.py       # Shared presentation constants
    ├── database/
    │   ├── engine.py      # SQLAlchemy engine + async helper
    │   └── models.py      # creator_mappings, ledger_entries
    ├── engine/
    │   ├── events.py      # PurchaseEvent parsing
    │   └── signature.py   # Webhook HMAC verification
    ├── services/
    │   ├── identity_service.py     # Email → member mapping
    │   ├── ledger_service.py       # Atomic XP accrual + ranking
    │   ├── order_service.py        # Webhook → ledger pipeline
    │   ├── leaderboard_service.py  # Render + publish-or-edit
    │   └── welcome_service.py      # Join greeting
    ├── bot/
    │   ├── core.py        # Bot subclass, cog loader
    │   └── cogs/
    │       ├── membership.py  # on_member_join → welcome
    │       └── meta.py        # /leaderboard
    └── api/
        ├── main.py        # FastAPI app
        ├── deps.py        # Engine/config/state dependencies, bearer auth
        └── routes/        # identity, webhooks, leaderboard
"""

__version__ = "0.1.0"
