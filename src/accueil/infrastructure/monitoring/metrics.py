"""
Prometheus metrics collection.
"""

from prometheus_client import Counter

# ============================================================
# Provisioning Metrics
# ============================================================

provisioning_runs_total = Counter(
    "accueil_provisioning_runs_total",
    "Provisioning runs by terminal state",
    ["state"],
)

wallet_heal_total = Counter(
    "accueil_wallet_heal_total",
    "Lazy wallet repair attempts",
    ["result"],
)

# ============================================================
# Record Store Metrics
# ============================================================

record_store_operations_total = Counter(
    "accueil_record_store_operations_total",
    "Record store operations",
    ["operation", "status"],
)

# ============================================================
# Identity Provider Metrics
# ============================================================

identity_requests_total = Counter(
    "accueil_identity_requests_total",
    "Identity provider requests",
    ["operation", "status"],
)
