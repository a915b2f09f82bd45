"""
Centralized constants for the WorkLedger report core.
All magic numbers shared across modules live here.
"""

# ===========================================
# PAGE DEFAULTS
# ===========================================
DEFAULT_PAGE_SIZE = 'A4'
DEFAULT_ORIENTATION = 'portrait'
DEFAULT_MARGIN = 20                   # mm, every side

# ===========================================
# SCHEMA
# ===========================================
SCHEMA_VERSION = 1                    # current layout schema version
SUPPORTED_SCHEMA_VERSIONS = [1]
EXPORT_FORMAT_VERSION = '1.0'         # layout export envelope version

# ===========================================
# FORMATTING
# ===========================================
EMPTY_PLACEHOLDER = '-'
CHECK_GLYPH = '✓'
CROSS_GLYPH = '✗'
DEFAULT_NUMBER_DECIMALS = 2           # floats only; ints render as-is

# ===========================================
# IMAGES
# ===========================================
IMAGE_TIMEOUT_SECONDS = 15.0
IMAGE_MAX_BYTES = 10 * 1024 * 1024    # 10 MB per attachment

# ===========================================
# OUTPUT
# ===========================================
SUPPORTED_OUTPUT_FORMATS = ['pdf', 'html']

# ===========================================
# LOGGING
# ===========================================
LOG_LEVEL = 'INFO'
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_FILE = 'logs/workledger.log'
LOG_MAX_SIZE_MB = 10
LOG_BACKUP_COUNT = 5
