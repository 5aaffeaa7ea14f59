"""
Project constants definitions
"""

# ============================================================
# Connection Defaults
# ============================================================

DEFAULT_SSH_PORT = 22
DEFAULT_SSH_TIMEOUT = 5
DEFAULT_HOST_KEY_POLICY = "known_hosts"
DEFAULT_REMOTE_HOME = "/root"

# ============================================================
# Sync Defaults
# ============================================================

DEFAULT_WORKERS = 4
DEFAULT_CHUNK_SIZE = 32 * 1024
DEFAULT_POLL_INTERVAL = 0.05

# tasks queued ahead of the pool, per worker
SUBMIT_WINDOW_PER_WORKER = 2

# Read size for command output channels
RECV_BUFFER_SIZE = 4096

# ============================================================
# SSH Config
# ============================================================

SSH_CONFIG_PATH = "~/.ssh/config"
KNOWN_HOSTS_PATH = "~/.ssh/known_hosts"

# ============================================================
# Environment
# ============================================================

ENV_PREFIX = "SSHSYNC_"
