from inbo.services.analytics import AnalyticsService
from inbo.services.auth import AuthService
from inbo.services.discover import DiscoverService
from inbo.services.email import EmailService
from inbo.services.newsletter import NewsletterService
from inbo.services.search import SearchService
from inbo.services.user import UserService

__all__ = [
    "AnalyticsService",
    "AuthService",
    "DiscoverService",
    "EmailService",
    "NewsletterService",
    "SearchService",
    "UserService",
]
