"""Company News Social — AI provider orchestration for news-to-social content."""

__version__ = "0.1.0"
