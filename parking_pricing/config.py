#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
config.py

This module defines configuration constants and defaults for the parking pricing engine.

Key idea: the engine itself is pure arithmetic
----------------------------------------------
Everything the engine reads (rates, time windows, thresholds, pricing rules) comes from
a rate configuration store. The store is an external collaborator; this module only
holds the knobs needed to reach it and the calendar constants used while pricing.

Rate and window labels are stored as free text in two languages:
- Rate type "Diária" / "daily"
- Window type "pernoite" / "overnight"

The normalization of those labels to closed enums lives in pricing/types.py.
"""

import os

# ---------------------------------------------------------------------
# Rate configuration store
# ---------------------------------------------------------------------
# STORE_URL:
# - Base URL of a PostgREST-style REST endpoint exposing the tables
#   rates / rate_time_windows / rate_thresholds / pricing_rules.
# - Example value: "https://project.supabase.co/rest/v1"
# - Empty means "no remote store"; the CLI then requires --store-file.
STORE_URL = os.getenv("PARKING_STORE_URL", "").strip()

# STORE_API_KEY:
# - Sent as both "apikey" and bearer token, the way PostgREST gateways expect it.
STORE_API_KEY = os.getenv("PARKING_STORE_API_KEY", "").strip()

# STORE_TIMEOUT:
# - Seconds for a single store read. Timeout policy belongs to the store, not to the engine.
STORE_TIMEOUT = float(os.getenv("PARKING_STORE_TIMEOUT", "15"))

# STORE_FILE:
# - Optional local YAML/JSON fixture with the same four tables (see store/memory.py).
STORE_FILE = os.getenv("PARKING_STORE_FILE", "").strip()

# ---------------------------------------------------------------------
# Defaults: currency / logging / tracing
# ---------------------------------------------------------------------
# CURRENCY:
# - Only used for rendering; amounts are plain decimals.
CURRENCY = os.getenv("PARKING_CURRENCY", "BRL")

LOG_LEVEL = os.getenv("PARKING_LOG_LEVEL", "INFO")

# TRACE_FILE:
# - If set, the CLI appends one JSON line per calculation phase to this file.
TRACE_FILE = os.getenv("PARKING_TRACE", "").strip()

# ---------------------------------------------------------------------
# Calendar constants
# ---------------------------------------------------------------------
MINUTES_PER_HOUR = 60
MINUTES_PER_DAY = 24 * MINUTES_PER_HOUR

# Default allowance of a weekly / biweekly rate when no time window is configured.
WEEKLY_PERIOD_DAYS = 7
BIWEEKLY_PERIOD_DAYS = 14

# Missing ticket/exit time falls back to midnight.
DEFAULT_TIME = "00:00"
