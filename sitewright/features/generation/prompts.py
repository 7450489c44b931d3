"""Prompt templates for website generation and modification.

The website shape the model must return is described here and nowhere else.
"""

import json
from typing import Any, Dict, List, Optional

from sitewright.features.generation.provider import Message

WEBSITE_SHAPE_EXAMPLE = {
    "title": "Business Name",
    "pages": [
        {
            "name": "Homepage",
            "slug": "home",
            "content": {
                "hero": {
                    "title": "Main headline",
                    "subtitle": "Supporting text",
                    "cta": "Call to action text",
                },
                "sections": [
                    {
                        "type": "about",
                        "title": "Section title",
                        "content": "Section content",
                    }
                ],
            },
        }
    ],
    "styling": {
        "primaryColor": "#3B82F6",
        "secondaryColor": "#6366F1",
        "fontFamily": "Inter",
    },
}

GENERATE_SYSTEM_PROMPT = (
    "You are an expert website builder AI. Generate a complete website structure "
    "based on the user's business description. Return a JSON object with exactly "
    "this structure:\n"
    f"{json.dumps(WEBSITE_SHAPE_EXAMPLE, indent=2)}\n\n"
    "Create 3-5 relevant pages (always include Homepage, About, Contact, and relevant "
    "service/product pages). Every page needs a name, a unique lowercase slug and a "
    "content object. styling must contain primaryColor, secondaryColor (hex colors) "
    "and fontFamily. Make content specific to their business, not generic. "
    "Respond with the JSON object only."
)

MODIFY_SYSTEM_PROMPT = (
    "You are an expert website editor AI. Modify the provided website content based on "
    "the user's instruction. Return the updated content as a JSON object, keeping the "
    "same structure (pages with name, slug and content; styling with primaryColor, "
    "secondaryColor and fontFamily) and every part the instruction does not touch. "
    "Be specific and make meaningful modifications. Respond with the JSON object only."
)

CONTENT_SYSTEM_PROMPT = (
    "Generate professional website content for a {business_type} business. Return a JSON "
    "object with sections like hero, about, services/products, testimonials, and contact. "
    "Make it specific and professional. Respond with the JSON object only."
)


def build_generate_messages(prompt: str, business_type: str, style: str) -> List[Message]:
    user = (
        f"Business Description: {prompt}\n"
        f"Business Type: {business_type}\n"
        f"Preferred Style: {style}\n\n"
        "Generate a complete website with specific, relevant content for this business."
    )
    return [
        {"role": "system", "content": GENERATE_SYSTEM_PROMPT},
        {"role": "user", "content": user},
    ]


def build_modify_messages(current_content: Dict[str, Any], instruction: str) -> List[Message]:
    user = (
        f"Current website content: {json.dumps(current_content)}\n\n"
        f"Instruction: {instruction}\n\n"
        "Apply this change and return the updated content as JSON."
    )
    return [
        {"role": "system", "content": MODIFY_SYSTEM_PROMPT},
        {"role": "user", "content": user},
    ]


def build_content_messages(business_type: str, prompt: Optional[str] = None) -> List[Message]:
    return [
        {"role": "system", "content": CONTENT_SYSTEM_PROMPT.format(business_type=business_type)},
        {"role": "user", "content": prompt or f"Generate content for a {business_type} business website."},
    ]
