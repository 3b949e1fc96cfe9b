"""
Services Module

- articles: slug allocation for new and renamed articles
- sharing: social share links for published articles
"""
from .articles import unique_slug
from .sharing import article_page_url, share_links

__all__ = [
    "unique_slug",
    "article_page_url",
    "share_links",
]
