"""Search-engine and link-preview metadata for project pages."""

from __future__ import annotations

from typing import Any

from wph.config import get_settings
from wph.projects.schemas import ProjectMetadata

DEFAULT_DESCRIPTION = "Discover innovative Web3 projects"


def project_url(username: str, slug: str) -> str:
    """Canonical absolute URL of a project page."""
    base = get_settings().site_url.rstrip("/")
    return f"{base}/projects/{username}/{slug}"


def build_project_metadata(
    *,
    title: str,
    slug: str,
    description: str | None,
    logo_url: str | None,
    website_url: str | None,
    owner_username: str,
    owner_name: str | None,
    category_name: str | None,
    tags: list[str],
    average_rating: float | None,
    review_count: int,
) -> ProjectMetadata:
    """Title, Open Graph, Twitter card and schema.org JSON-LD for one project."""
    settings = get_settings()
    author = owner_name or owner_username
    summary = description or DEFAULT_DESCRIPTION
    url = project_url(owner_username, slug)
    images = [logo_url] if logo_url else []

    json_ld: dict[str, Any] = {
        "@context": "https://schema.org",
        "@type": "SoftwareApplication",
        "name": title,
        "description": summary,
        "url": url,
        "applicationCategory": category_name or "Web3",
        "operatingSystem": "Web",
        "author": {
            "@type": "Person",
            "name": author,
            "url": f"{settings.site_url.rstrip('/')}/users/{owner_username}",
        },
        "keywords": ", ".join(tags),
    }
    if logo_url:
        json_ld["image"] = logo_url
    if website_url:
        json_ld["sameAs"] = [website_url]
    if average_rating is not None and review_count > 0:
        json_ld["aggregateRating"] = {
            "@type": "AggregateRating",
            "ratingValue": average_rating,
            "reviewCount": review_count,
            "bestRating": 5,
            "worstRating": 1,
        }

    return ProjectMetadata(
        title=f"{title} by {author} - {settings.site_name}",
        description=summary,
        keywords=tags,
        canonical_url=url,
        open_graph={
            "title": title,
            "description": summary,
            "url": url,
            "images": images,
            "type": "article",
            "siteName": settings.site_name,
        },
        twitter={
            "card": "summary_large_image",
            "title": title,
            "description": summary,
            "images": images,
        },
        json_ld=json_ld,
    )
