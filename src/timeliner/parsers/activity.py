"""Keyword tagging of web history URLs."""

FILE_ACCESS_PREFIX = "file:///"

SEARCH_TERMS: tuple[str, ...] = (
    "search",
    "query",
    "q=",
    "p=",
    "find",
    "lookup",
    "google.com/search",
    "bing.com/search",
    "duckduckgo.com/?q=",
    "yahoo.com/search",
)

DOWNLOAD_TERMS: tuple[str, ...] = (
    "download",
    ".exe",
    ".zip",
    ".rar",
    ".7z",
    ".msi",
    ".iso",
    ".pdf",
    ".dll",
    "/downloads/",
)


def url_activity(url: str) -> str:
    """Sub-activity suffix for a visited URL.

    Returns:
        ' + File Open Access', ' + Search', ' + Download' or ''
    """
    url = url.strip().lower()
    if url.startswith(FILE_ACCESS_PREFIX):
        return " + File Open Access"
    if any(term in url for term in SEARCH_TERMS):
        return " + Search"
    if any(term in url for term in DOWNLOAD_TERMS):
        return " + Download"
    return ""
