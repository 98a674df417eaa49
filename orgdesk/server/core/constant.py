"""Static server constants."""

PROJECT_NAME = "orgdesk"
API_V1_STR = "/api/v1"
SCHEMA_VERSION = "20261019_000000"
