"""
모델 패키지
"""

from .tenant import Tenant
from .faq_category import Category
from .faq import FAQArticle
from .site_config import SiteConfig

__all__ = [
    "Tenant",
    "Category",
    "FAQArticle",
    "SiteConfig",
]
