"""Constants for imagemeta-snapshot."""

# Storage directories (relative to the store root)
SNAPSHOT_DIR = "snapshots"
METADATA_DIR = "snapshot_metadata"

# File naming
SNAPSHOT_INFIX = "_snapshot_"
SNAPSHOT_SUFFIX = ".txt"
METADATA_SUFFIX = ".metadata"
TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"
TIMESTAMP_PATTERN = r"\d{8}_\d{6}"

# Metadata keys
HASH_KEY = "HASH"
TIMESTAMP_KEY = "TIMESTAMP"
FILE_SIZE_KEY = "FILE_SIZE"
FILE_COUNT_KEY = "FILE_COUNT"

# Configuration
CONFIG_FILE = "imagemeta.yaml"
IGNORE_FILE = ".imagemetaignore"
STORE_ROOT_ENV = "IMAGEMETA_STORE_ROOT"

# Supported image extensions (lowercase, no dot)
SUPPORTED_EXTENSIONS = ("jpg", "jpeg", "png", "webp", "gif", "bmp")

# Permissions
OWNER_DIR_MODE = 0o700
OWNER_FILE_MODE = 0o600

# Version
PACKAGE_VERSION = "0.1.0"
