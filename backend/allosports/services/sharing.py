"""
Share links for social platforms.

Builds the share-intent URLs the article page offers (Facebook, X) so
clients do not each have to assemble them.
"""
from urllib.parse import quote, urlencode

FACEBOOK_SHARER = "https://www.facebook.com/sharer/sharer.php"
X_INTENT = "https://twitter.com/intent/tweet"


def article_page_url(base_url: str, article_id: str) -> str:
    """Public page of an article, e.g. https://site/article/<id>"""
    return f"{base_url.rstrip('/')}/article/{quote(article_id)}"


def share_links(page_url: str, title: str) -> dict:
    """
    Returns:
        dict with:
            - url: the page being shared
            - facebook: Facebook sharer URL
            - x: X (Twitter) tweet intent URL, prefilled with the title
    """
    return {
        "url": page_url,
        "facebook": f"{FACEBOOK_SHARER}?{urlencode({'u': page_url})}",
        "x": f"{X_INTENT}?{urlencode({'url': page_url, 'text': title})}",
    }
