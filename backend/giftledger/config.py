# backend/giftledger/config.py
from __future__ import annotations
import os


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # Single JSON document holding the whole dataset.
    # Relative paths resolve against the Flask instance folder.
    GIFTLEDGER_DATA_FILE = os.environ.get("GIFTLEDGER_DATA_FILE", "giftSystemData.json")

    SESSION_ABSOLUTE_TIMEOUT_HOURS = int(os.environ.get("SESSION_ABSOLUTE_TIMEOUT_HOURS", "24"))
    SESSION_IDLE_TIMEOUT_HOURS = int(os.environ.get("SESSION_IDLE_TIMEOUT_HOURS", "2"))

    # bcrypt cost factor; tests lower it to 4
    BCRYPT_ROUNDS = int(os.environ.get("BCRYPT_ROUNDS", "12"))

    # Password given to the fixture accounts when the seed dataset is materialized
    SEED_PASSWORD = os.environ.get("SEED_PASSWORD", "Password123!")

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
