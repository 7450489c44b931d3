"""
Template gateway.

Handles:
- Gallery listing (active only, most viewed first, optional category filter)
- Single template lookup
- Atomic view counter
- Template creation for seeding/operators
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import func, insert, select, update

from sitewright.core.database import storage_session, templates
from sitewright.models.content import validate_site_content
from sitewright.models.template import Template


def _to_template(row) -> Template:
    return Template(
        id=row.id,
        name=row.name,
        description=row.description,
        category=row.category,
        preview_image=row.preview_image,
        content=row.content,
        is_active=row.is_active,
        view_count=row.view_count,
        created_at=row.created_at,
    )


def list_templates(category: Optional[str] = None) -> List[Template]:
    query = select(templates).where(templates.c.is_active.is_(True))
    if category:
        query = query.where(templates.c.category == category)
    query = query.order_by(templates.c.view_count.desc(), templates.c.name)

    with storage_session("templates.list") as session:
        rows = session.execute(query).all()
        return [_to_template(row) for row in rows]


def get_template(template_id: str) -> Optional[Template]:
    with storage_session("templates.get") as session:
        row = session.execute(select(templates).where(templates.c.id == template_id)).first()
        return _to_template(row) if row else None


def increment_template_view_count(template_id: str) -> Optional[Template]:
    """
    Add one to view_count as a single UPDATE and return the updated template.

    Returns None if the template does not exist.
    """
    with storage_session("templates.increment_view_count") as session:
        result = session.execute(
            update(templates)
            .where(templates.c.id == template_id)
            .values(view_count=templates.c.view_count + 1)
        )
        if result.rowcount == 0:
            return None
        row = session.execute(select(templates).where(templates.c.id == template_id)).first()
        return _to_template(row)


def create_template(
    *,
    name: str,
    category: str,
    content: Dict[str, Any],
    description: Optional[str] = None,
    preview_image: Optional[str] = None,
    is_active: bool = True,
) -> Template:
    validate_site_content(content)
    template_id = str(uuid.uuid4())
    with storage_session("templates.create") as session:
        session.execute(
            insert(templates).values(
                id=template_id,
                name=name,
                description=description,
                category=category,
                preview_image=preview_image,
                content=content,
                is_active=is_active,
                view_count=0,
                created_at=datetime.now(timezone.utc),
            )
        )
    return get_template(template_id)


def count_templates() -> int:
    with storage_session("templates.count") as session:
        return session.execute(select(func.count()).select_from(templates)).scalar_one()
