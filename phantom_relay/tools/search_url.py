"""
LinkedIn people-search URL builder.

The company is wrapped in quotes so LinkedIn matches it exactly.
"""

from urllib.parse import quote

from phantom_relay.errors import ValidationError

LINKEDIN_PEOPLE_SEARCH_URL = "https://www.linkedin.com/search/results/people/"

# RFC 3986 marks left unescaped in keyword values
_SAFE_CHARS = "!*'()"


def build_search_url(title: str, company: str) -> str:
    """
    Build a LinkedIn people-search URL for a job title at a company.

    Args:
        title: Job title (e.g., "Regulatory Compliance Director")
        company: Company name, matched exactly

    Returns:
        Search URL with title and quoted company percent-encoded
    """
    title = (title or "").strip()
    company = (company or "").strip()
    if not title:
        raise ValidationError("Job title is required.")
    if not company:
        raise ValidationError("Company name is required.")

    keywords = f"{quote(title, safe=_SAFE_CHARS)}%20%22{quote(company, safe=_SAFE_CHARS)}%22"
    return f"{LINKEDIN_PEOPLE_SEARCH_URL}?keywords={keywords}"
