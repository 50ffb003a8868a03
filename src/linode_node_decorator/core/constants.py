"""
constants.py
- Project-wide constants shared across the watcher, synchronizer and clients.
"""

# --- Polling ---
DEFAULT_POLL_INTERVAL = 60  # seconds
DEFAULT_EVENT_BUFFER = 16   # pending events per watcher queue

# --- Linode Metadata Service ---
DEFAULT_METADATA_BASE_URL = "http://169.254.169.254"
DEFAULT_TOKEN_EXPIRY = 3600     # seconds
TOKEN_REFRESH_MARGIN = 60       # refresh this many seconds before expiry
DEFAULT_METADATA_TIMEOUT = 10   # seconds per HTTP request
TOKEN_RETRY_ATTEMPTS = 3
TOKEN_RETRY_WAIT = 2            # seconds

# --- Label Schema (read by other systems; do not rename) ---
LABEL_SCHEMA = {
    "label": "linode_label",
    "id": "linode_id",
    "region": "linode_region",
    "type": "linode_type",
    "host_uuid": "linode_host",
}

# --- Cluster Backends ---
BACKEND_KUBERNETES = "kubernetes"
BACKEND_SWARM = "swarm"
SUPPORTED_BACKENDS = (BACKEND_KUBERNETES, BACKEND_SWARM)

DEFAULT_CONFIG_FILE = "/etc/linode-node-decorator/config.yml"
