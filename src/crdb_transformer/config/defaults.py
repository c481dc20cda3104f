"""Built-in defaults and environment variable names."""

from __future__ import annotations

# Environment variable carrying the function configuration document.
CONFIG_ENV_VAR = "API_CONFIG"
# Environment variable carrying the default replica count.
REPLICAS_ENV_VAR = "REPLICAS"

# Used when neither the document nor the environment sets replicas.
DEFAULT_REPLICAS = 1

# Appended to the cluster name to form the ``app`` label of every resource.
APP_LABEL_SUFFIX = "-cockroachdb"

DEFAULT_TEMPLATE = "cockroachdb"

# strconv-style bounds for the environment default.
MIN_REPLICAS = -(2**63)
MAX_REPLICAS = 2**63 - 1
