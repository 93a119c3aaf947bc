from typing import Iterable, List, Union

from sqlalchemy import func

from pagetree.extensions import db
from pagetree.models.tag import Tag, TagRelation
from .routes import urlify


def resolve_or_create(label: str) -> int:
    """Return the id of the tag with this label, creating it if needed."""
    label = label.strip()
    tag = Tag.query.filter(func.lower(Tag.tag) == label.lower()).first()
    if tag:
        return tag.id

    tag = Tag()
    tag.tag = label
    tag.route = urlify(label)
    tag.usage_count = 0
    db.session.add(tag)
    db.session.flush()
    return tag.id


def resolve_tags(tags: Iterable[Union[int, str]]) -> List[int]:
    """
    Turn a mix of tag ids and labels into unique ids, preserving order.

    Only integers are taken as ids; every string is a label, "2024" included.
    """
    ids: List[int] = []
    for tag in tags or []:
        if isinstance(tag, str):
            if not tag.strip():
                continue
            tag_id = resolve_or_create(tag)
        else:
            tag_id = int(tag)
        if tag_id not in ids:
            ids.append(tag_id)
    return ids


def tag_ids_for(entry_id, table: str = "pages") -> List[int]:
    rows = (
        db.session.query(TagRelation.tag_id)
        .filter_by(table=table, entry=str(entry_id))
        .all()
    )
    return [row.tag_id for row in rows]


def set_tags(entry_id, tag_ids: Iterable[int], table: str = "pages") -> List[int]:
    """
    Replace the tag set of an entry.

    Returns every tag id whose usage may have changed (old and new).
    """
    existing = tag_ids_for(entry_id, table)

    TagRelation.query.filter_by(table=table, entry=str(entry_id)).delete(
        synchronize_session=False
    )

    new_ids = []
    for tag_id in tag_ids:
        if tag_id in new_ids:
            continue
        relation = TagRelation()
        relation.table = table
        relation.entry = str(entry_id)
        relation.tag_id = tag_id
        db.session.add(relation)
        new_ids.append(tag_id)

    db.session.flush()
    touched = list(dict.fromkeys(existing + new_ids))
    update_reference_counts(touched)
    return touched


def clear_tags(entry_id, table: str = "pages") -> None:
    set_tags(entry_id, [], table)


def update_reference_counts(tag_ids: Iterable[int]) -> None:
    for tag_id in set(tag_ids):
        tag = db.session.get(Tag, tag_id)
        if tag is None:
            continue
        tag.usage_count = TagRelation.query.filter_by(tag_id=tag_id).count()
