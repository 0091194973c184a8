"""Common literal values used across ops_config.

Virtual API prefixes, header names, and service endpoints live here so the
resolver, interceptor, and tests share one copy of each value.

Examples
--------
>>> from ops_config import _constants
>>> _constants.METADATA_SCHEMA_API.startswith("https://ops/")
True
"""

from pathlib import Path

MONIKER_DEFINITION_API = "https://ops/monikerDefinition/"
METADATA_SCHEMA_API = "https://ops/metadataschema/"
MARKDOWN_VALIDATION_RULES_API = "https://ops/markdownvalidationrules/"

OPS_TOKEN_HEADER = "X-OP-BuildUserToken"
REPOSITORY_URL_HEADER = "X-Metadata-RepositoryUrl"
REPOSITORY_BRANCH_HEADER = "X-Metadata-RepositoryBranch"
METADATA_VERSION_HEADER = "X-Metadata-Version"

PROD_BUILD_SERVICE_ENDPOINT = "https://op-build-prod.azurewebsites.net"
SANDBOX_BUILD_SERVICE_ENDPOINT = "https://op-build-sandbox2.azurewebsites.net"
PROD_VALIDATION_SERVICE_ENDPOINT = "https://docs.microsoft.com/api/metadata"
PPE_VALIDATION_SERVICE_ENDPOINT = "https://ppe.docs.microsoft.com/api/metadata"

DOCSET_QUERY_STATUS = "Created"
LIVE_BRANCHES = frozenset({"live", "live-sxs"})

OPS_METADATA_SCHEMA_PATH = Path(__file__).parent / "data" / "schemas" / "OpsMetadata.json"
