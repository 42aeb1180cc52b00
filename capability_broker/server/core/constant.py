"""Server-wide constants."""

PROJECT_NAME = "Capability Broker"
API_VERSION = "0.1.0"
SCHEMA_VERSION = "v1"
METHOD_CATALOG_KIND = "method-catalog"
