"""HTTP client factory for external API calls.

Clients are created once in the application lifespan and closed on shutdown;
nothing here keeps module-level state.
"""

import httpx

# Default timeout configuration (seconds)
DEFAULT_CONNECT_TIMEOUT = 5.0
DEFAULT_READ_TIMEOUT = 10.0
DEFAULT_WRITE_TIMEOUT = 10.0
DEFAULT_POOL_TIMEOUT = 5.0


def create_http_client(
    base_url: str = "",
    max_connections: int = 20,
    max_keepalive_connections: int = 10,
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
    read_timeout: float = DEFAULT_READ_TIMEOUT,
    write_timeout: float = DEFAULT_WRITE_TIMEOUT,
    pool_timeout: float = DEFAULT_POOL_TIMEOUT,
    headers: dict[str, str] | None = None,
) -> httpx.AsyncClient:
    """Create a configured async HTTP client.

    Args:
        base_url: Base URL for all requests (empty string for none)
        max_connections: Maximum number of concurrent connections
        max_keepalive_connections: Maximum idle connections to keep alive
        connect_timeout: Timeout for establishing connection
        read_timeout: Timeout for reading response
        write_timeout: Timeout for sending request
        pool_timeout: Timeout for acquiring connection from pool
        headers: Default headers sent with every request

    Returns:
        Configured httpx.AsyncClient instance
    """
    return httpx.AsyncClient(
        base_url=base_url,
        headers=headers,
        timeout=httpx.Timeout(
            connect=connect_timeout,
            read=read_timeout,
            write=write_timeout,
            pool=pool_timeout,
        ),
        limits=httpx.Limits(
            max_connections=max_connections,
            max_keepalive_connections=max_keepalive_connections,
        ),
    )


def create_moderation_client(api_key: str | None, timeout: float) -> httpx.AsyncClient:
    """Create the pooled client used to reach the moderation pipeline.

    Read timeout follows the configured pipeline bound so a slow pipeline
    surfaces as an httpx timeout rather than hanging the profile update.
    """
    headers = {"Authorization": f"Bearer {api_key}"} if api_key else None
    return create_http_client(
        max_connections=50,
        max_keepalive_connections=10,
        read_timeout=timeout,
        headers=headers,
    )
