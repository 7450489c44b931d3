"""
Starter template seeding.

Inserts a small starter gallery (restaurant, personal, service and portfolio)
when the templates table is empty. Other categories start empty. Safe to call
repeatedly.
"""

from typing import Any, Dict, List

from sitewright.core.logging import log_event
from sitewright.features.templates.service import count_templates, create_template
from sitewright.models.template import TemplateCategory


def _page(name: str, slug: str, title: str, subtitle: str, cta: str, sections: List[Dict[str, str]]) -> Dict[str, Any]:
    return {
        "name": name,
        "slug": slug,
        "content": {
            "hero": {"title": title, "subtitle": subtitle, "cta": cta},
            "sections": sections,
        },
    }


def _contact_page(cta: str) -> Dict[str, Any]:
    return _page(
        "Contact",
        "contact",
        "Get in touch",
        "We usually reply within one business day.",
        cta,
        [{"type": "contact", "title": "Visit or call", "content": "Add your address, phone and opening hours here."}],
    )


STARTER_TEMPLATES: List[Dict[str, Any]] = [
    {
        "name": "Bistro",
        "category": TemplateCategory.RESTAURANT.value,
        "description": "Warm, menu-first layout for restaurants and cafes.",
        "content": {
            "pages": [
                _page("Homepage", "home", "Fresh food, made daily", "Seasonal dishes from local producers.", "Book a table",
                      [{"type": "about", "title": "Our kitchen", "content": "Tell guests what makes your food special."}]),
                _page("Menu", "menu", "Menu", "Starters, mains and desserts.", "Order online",
                      [{"type": "menu", "title": "Mains", "content": "List your signature dishes and prices."}]),
                _contact_page("Reserve now"),
            ],
            "styling": {"primaryColor": "#DC2626", "secondaryColor": "#F59E0B", "fontFamily": "Playfair Display"},
        },
    },
    {
        "name": "Personal Card",
        "category": TemplateCategory.PERSONAL.value,
        "description": "A single-page introduction with links and a short bio.",
        "content": {
            "pages": [
                _page("Homepage", "home", "Hi, I'm Alex", "Writer, runner and tinkerer.", "Say hello",
                      [{"type": "about", "title": "About me", "content": "A few lines about who you are."}]),
                _contact_page("Send a message"),
            ],
            "styling": {"primaryColor": "#0EA5E9", "secondaryColor": "#6366F1", "fontFamily": "Inter"},
        },
    },
    {
        "name": "Local Service",
        "category": TemplateCategory.SERVICE.value,
        "description": "Services, pricing and quote requests for trades and consultants.",
        "content": {
            "pages": [
                _page("Homepage", "home", "Reliable help when you need it", "Licensed, insured and on time.", "Get a quote",
                      [{"type": "services", "title": "What we do", "content": "Describe your core services."}]),
                _page("Services", "services", "Services", "Transparent pricing for every job.", "Request a visit",
                      [{"type": "pricing", "title": "Pricing", "content": "List your packages."}]),
                _contact_page("Request a quote"),
            ],
            "styling": {"primaryColor": "#16A34A", "secondaryColor": "#0F172A", "fontFamily": "Roboto"},
        },
    },
    {
        "name": "Showcase",
        "category": TemplateCategory.PORTFOLIO.value,
        "description": "Project grid and case studies for designers and developers.",
        "content": {
            "pages": [
                _page("Homepage", "home", "Selected work", "Design and engineering for product teams.", "View projects",
                      [{"type": "gallery", "title": "Projects", "content": "Add your best projects."}]),
                _page("About", "about", "About", "Ten years of shipping products.", "Download CV",
                      [{"type": "about", "title": "Experience", "content": "Summarize your background."}]),
                _contact_page("Start a project"),
            ],
            "styling": {"primaryColor": "#111827", "secondaryColor": "#8B5CF6", "fontFamily": "Space Grotesk"},
        },
    },
]


def seed_templates() -> int:
    """Insert the starter templates if none exist. Returns the number inserted."""
    if count_templates() > 0:
        return 0

    for starter in STARTER_TEMPLATES:
        create_template(
            name=starter["name"],
            category=starter["category"],
            description=starter["description"],
            content=starter["content"],
        )
    log_event("info", "templates.seeded", event_type="templates.seeded", extra={"count": len(STARTER_TEMPLATES)})
    return len(STARTER_TEMPLATES)
