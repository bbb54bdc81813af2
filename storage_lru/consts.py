"""Defaults and record format constants."""

# Record format
CUR_VERSION = "1"
META_FIELD_COUNT = 6

# Cache-Control directives
MAX_AGE = "max-age"
STALE_WHILE_REVALIDATE = "stale-while-revalidate"
NO_CACHE = "no-cache"
NO_STORE = "no-store"

# Engine defaults
DEFAULT_KEY_PREFIX = ""
DEFAULT_PRIORITY = 3  # 1 is the most important; larger values are purged first
DEFAULT_RECHECK_DELAY = -1  # seconds, -1 disables the re-enable timer
DEFAULT_PURGE_FACTOR = 1.0  # purge space_needed * (1 + factor)
DEFAULT_MAX_PURGE_ATTEMPTS = 2
DEFAULT_PURGE_LOAD_INCREASE = 500  # extra keys scanned into the index per attempt

# CLI
DEFAULT_DATA_DIR_ENV = "STORAGE_LRU_DIR"
DEFAULT_DATA_DIR_NAME = ".storage_lru"
