"""
Application configuration loaded from environment variables.

Uses pydantic-settings to define typed configuration that automatically reads
from environment variables (and a local .env file, if present).

The settings are read exactly once, in server.main(), and then handed to the
ParseClient and build_server() explicitly. Nothing below the entry point
looks configuration up on its own.

Environment variables:
    PARSE_URL (or PARSE_SERVER_URL)   Parse Server REST mount, e.g. https://host/parse
    PARSE_APP_ID                      Application id (X-Parse-Application-Id)
    PARSE_REST_KEY                    REST API key (subject to ACL/CLP checks)
    PARSE_MASTER_KEY                  Master key (bypasses ACL/CLP checks)
    PARSE_ALLOW_SELF_SIGNED           Accept invalid TLS certificates ("true"/"false");
                                      ALLOW_SELF_SIGNED_CERT is accepted as well
    NODE_TLS_REJECT_UNAUTHORIZED=0    Same effect as PARSE_ALLOW_SELF_SIGNED=true
    PARSE_REQUEST_TIMEOUT             Seconds before an upstream call is abandoned
                                      (unset = wait forever)
    PARSE_MCP_TRANSPORT               "stdio" (default) or "streamable-http"
    PARSE_MCP_HOST / PARSE_MCP_PORT   Bind address for the HTTP transport
    PARSE_MCP_LOG_LEVEL               Python logging level name
"""

from typing import Literal

from pydantic import AliasChoices, Field, ValidationError, model_validator
from pydantic_settings import BaseSettings

from parse_mcp.errors import ConfigurationError


class Settings(BaseSettings):
    """
    Server configuration with environment variable bindings.

    Each field maps to an environment variable with the PARSE_ prefix. For
    example, `app_id` reads from PARSE_APP_ID and `mcp_port` from
    PARSE_MCP_PORT. `url` and `allow_self_signed` list their env names
    explicitly because each accepts two spellings.
    """

    # --- Parse Server connection ---

    # Base URL that every request path is appended to, verbatim.
    url: str = Field(validation_alias=AliasChoices("PARSE_URL", "PARSE_SERVER_URL"))

    app_id: str

    # At least one of the two keys must be present (checked below).
    rest_key: str | None = None
    master_key: str | None = None

    allow_self_signed: bool = Field(
        default=False,
        validation_alias=AliasChoices("PARSE_ALLOW_SELF_SIGNED", "ALLOW_SELF_SIGNED_CERT"),
    )

    # Node-style switch: "0" also turns certificate checks off.
    node_tls_reject_unauthorized: str | None = Field(
        default=None,
        validation_alias="NODE_TLS_REJECT_UNAUTHORIZED",
        exclude=True,
    )

    # None keeps httpx from timing out at all.
    request_timeout: float | None = None

    # --- MCP server settings ---

    mcp_transport: Literal["stdio", "streamable-http"] = "stdio"
    mcp_host: str = "127.0.0.1"
    mcp_port: int = 8080
    mcp_log_level: str = "info"

    model_config = {
        "env_prefix": "PARSE_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        # Aliased fields (url, allow_self_signed) also accept their field name.
        "populate_by_name": True,
    }

    @model_validator(mode="after")
    def _require_credentials(self) -> "Settings":
        if not self.url or not self.app_id:
            raise ValueError("Missing environment variables: PARSE_URL / PARSE_APP_ID")
        if not self.rest_key and not self.master_key:
            raise ValueError("Provide at least one of PARSE_REST_KEY or PARSE_MASTER_KEY")
        if self.node_tls_reject_unauthorized == "0":
            self.allow_self_signed = True
        return self

    def masked(self) -> dict[str, str | bool]:
        """Connection settings safe to log: keys are reduced to their edges."""
        return {
            "url": self.url,
            "app_id": mask_key(self.app_id),
            "rest_key": mask_key(self.rest_key),
            "master_key": mask_key(self.master_key),
            "allow_self_signed": self.allow_self_signed,
        }


def mask_key(key: str | None) -> str:
    if not key:
        return "not configured"
    if len(key) <= 8:
        return "***"
    return f"{key[:4]}***{key[-4:]}"


def load_settings(**overrides) -> Settings:
    """
    Read the settings from the environment.

    Raises:
        ConfigurationError: If a required value is missing or malformed.
            The pydantic error is flattened into a single readable message.
    """
    try:
        return Settings(**overrides)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'settings'}: {err['msg']}"
            for err in exc.errors()
        )
        raise ConfigurationError(f"Invalid configuration: {problems}") from exc
