import requests

DEFAULT_TIMEOUT = 10


def fetch_calendar(source: str, timeout: float = DEFAULT_TIMEOUT) -> str:
    """
    Downloads iCal data from an http(s) URL and returns the raw ICS text.
    Anything else (local paths, file://, ftp://) is refused: calendar URLs
    come from client data and must not reach the server's filesystem.
    """

    if not isinstance(source, str) or not source.lower().startswith(("http://", "https://")):
        raise ValueError(f"Unsupported calendar URL: {source!r}")

    response = requests.get(source, timeout=timeout)
    response.raise_for_status()
    # Feeds rarely declare a charset; requests would fall back to latin-1
    return response.content.decode("utf-8", errors="replace")
