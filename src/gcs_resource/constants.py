"""
Constants and configuration values for gcs-resource.

This module contains the hardcoded names, messages, and defaults used
throughout the resource.
"""

# Application identity
APP_NAME = "gcs-resource"
USER_AGENT = "gcs-resource/0.1.0"

# Storage URL scheme
GCS_URL_SCHEME = "gs://"

# Regular expression metacharacters that end a literal listing prefix
REGEXP_SPECIAL_CHARS = r"\*.[](){}?|^$+"

# Name of the capturing group preferred when a pattern has several groups
VERSION_GROUP_NAME = "version"

# Marker files written into the destination directory by `in`
VERSION_FILE_NAME = "version"
GENERATION_FILE_NAME = "generation"
URL_FILE_NAME = "url"

# Metadata pair names
METADATA_FILENAME = "filename"
METADATA_URL = "url"

# File permissions
DIRECTORY_PERMISSIONS = 0o755
FILE_PERMISSIONS = 0o644

# Archive detection
MIME_TYPE_ZIP = "application/zip"
MIME_TYPE_TAR = "application/x-tar"
MIME_TYPE_GZIP = "application/gzip"
MAGIC_HEADER_SIZE = 512
ZIP_MAGIC = b"PK\x03\x04"
ZIP_EMPTY_MAGIC = b"PK\x05\x06"
GZIP_MAGIC = b"\x1f\x8b"
TAR_MAGIC = b"ustar"
TAR_MAGIC_OFFSET = 257
UNCOMPRESSED_SUFFIX = ".uncompressed"

# Bool-like strings accepted for `skip_download`
TRUE_STRINGS = frozenset({"1", "t", "true"})
FALSE_STRINGS = frozenset({"0", "f", "false"})

# User-facing messages
MSG_SPECIFY_BUCKET = "please specify the bucket"
MSG_SPECIFY_MODE = "please specify either regexp or versioned_file"
MSG_INITIAL_VERSION_INT = "if set, initial_version must be an int64"
MSG_INITIAL_CONTENT_BOTH = (
    "use initial_content_text or initial_content_binary but not both"
)
MSG_INITIAL_CONTENT_BASE64 = "initial_content_binary could not be decoded to base64"
MSG_INITIAL_PATH_FOR_REGEXP = "use initial_path when regexp is set"
MSG_INITIAL_VERSION_FOR_FILE = "use initial_version when versioned_file is set"
MSG_INITIAL_CONTENT_WITHOUT_SEED = (
    "use initial_version or initial_path when initial content is set"
)
MSG_SPECIFY_FILE = "please specify the file"
MSG_NO_EXTRACTIONS = "no extractions could be found - is your regexp correct?"
MSG_NO_FILE_MATCHES = "no matches found for pattern: {pattern}"
MSG_MULTIPLE_FILE_MATCHES = "more than one match found for pattern: {pattern}"
MSG_BUCKET_NOT_VERSIONED = "bucket is not versioned"
MSG_INVALID_SKIP_DOWNLOAD = "invalid skip_download value specified: {value}"
MSG_UNPACK_FAILED = (
    "failed to extract '{name}' with the 'params.unpack' option enabled: {reason}"
)

# Configuration file
CONFIG_FILE_NAME = "config.yaml"
CONFIG_PATH_ENV_VAR = "GCS_RESOURCE_CONFIG"

# Logging configuration
LOGGER_NAME = "gcs_resource"
LOG_LEVEL_ENV_VAR = "GCS_RESOURCE_LOG_LEVEL"
LOG_FILE_NAME = "gcs-resource.log"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
INFO_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
DEBUG_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s: %(message)s"
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024  # 10 MB
LOG_FILE_BACKUP_COUNT = 5
