from typing import Any, Dict, List

from pagetree.extensions import db
from pagetree.models.template import Template


def fields_for(template_id: str) -> List[Dict[str, Any]]:
    """Field definitions for a template, empty when it does not exist."""
    if not template_id:
        return []
    template = db.session.get(Template, template_id)
    if template is None or not isinstance(template.fields, list):
        return []
    return [field for field in template.fields if isinstance(field, dict) and field.get("id")]
