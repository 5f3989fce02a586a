"""
Runtime configuration for the MeshPulse pipeline.

All values are read from the environment (a local .env file is honoured)
and exposed as module constants. Thresholds are also wrapped in small
dataclasses so callers and tests can override them per call.
"""

import os

from dotenv import load_dotenv

load_dotenv()

REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

# ── Refresh cycle ─────────────────────────────────────────────────────────────
REFRESH_INTERVAL_SECONDS = int(os.environ.get("REFRESH_INTERVAL_SECONDS", "60"))
HISTORY_WINDOW = int(os.environ.get("HISTORY_WINDOW", "25"))   # trailing day, hourly
SIMULATION_SEED = os.environ.get("SIMULATION_SEED") or None

STATIONS_CONFIG = os.environ.get(
    "STATIONS_CONFIG",
    os.path.join(REPO_ROOT, "config", "stations.json"),
)
CATEGORIES_CONFIG = os.environ.get(
    "CATEGORIES_CONFIG",
    os.path.join(REPO_ROOT, "config", "naqi_categories.json"),
)

# ── Triangulation thresholds (relative deviation) ─────────────────────────────
VERIFY_HIGH_THRESHOLD = float(os.environ.get("VERIFY_HIGH_THRESHOLD", "0.20"))
VERIFY_MEDIUM_THRESHOLD = float(os.environ.get("VERIFY_MEDIUM_THRESHOLD", "0.50"))

# ── Cluster thresholds (relative deviation from cluster mean) ─────────────────
# Two variants exist in the field: 0.35/0.30/0.15 and 0.50/0.40/0.20.
CLUSTER_ANOMALY_THRESHOLD = float(os.environ.get("CLUSTER_ANOMALY_THRESHOLD", "0.35"))
CLUSTER_LOW_THRESHOLD = float(os.environ.get("CLUSTER_LOW_THRESHOLD", "0.30"))
CLUSTER_MEDIUM_THRESHOLD = float(os.environ.get("CLUSTER_MEDIUM_THRESHOLD", "0.15"))

# ── Synthetic secondary reference (demo only) ─────────────────────────────────
SECONDARY_REF_LOW = float(os.environ.get("SECONDARY_REF_LOW", "0.95"))
SECONDARY_REF_HIGH = float(os.environ.get("SECONDARY_REF_HIGH", "1.05"))
