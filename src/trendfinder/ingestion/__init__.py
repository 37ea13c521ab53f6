"""Ingestion pipeline — source fetching and normalization."""

from trendfinder.ingestion.newsletter_adapter import NewsletterAdapter
from trendfinder.ingestion.registry import register_adapter
from trendfinder.ingestion.social_adapter import SocialSearchAdapter, SocialUserAdapter
from trendfinder.ingestion.source import SourceKind
from trendfinder.ingestion.website_adapter import WebsiteAdapter

register_adapter(SourceKind.WEBSITE, WebsiteAdapter)
register_adapter(SourceKind.NEWSLETTER, NewsletterAdapter)
register_adapter(SourceKind.SOCIAL_USER, SocialUserAdapter)
register_adapter(SourceKind.SOCIAL_SEARCH, SocialSearchAdapter)
