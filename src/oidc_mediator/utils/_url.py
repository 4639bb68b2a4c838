from urllib.parse import urlencode, urlparse


def with_query(url: str, query_params: dict[str, str]) -> str:
    """Append ``query_params`` to ``url``, keeping any query it already has."""
    separator = "&" if urlparse(url).query else "?"

    return f"{url}{separator}{urlencode(query_params)}"


def join_url(base_url: str, path: str) -> str:
    """Join ``path`` onto ``base_url`` without dropping the base path.

    ``join_url("https://backend.example.com/", "/api/tokens")`` and
    ``join_url("https://backend.example.com", "api/tokens")`` both give
    ``https://backend.example.com/api/tokens``.
    """
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"
