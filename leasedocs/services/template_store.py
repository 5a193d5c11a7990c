"""Template store: named templates with derived placeholder variables"""

import logging
from datetime import datetime
from typing import Callable, Mapping, Optional
from uuid import uuid4

from pydantic import ValidationError as PydanticValidationError

from leasedocs.db.base import DatabaseInterface
from leasedocs.errors import InvalidStateError, NotFoundError, ValidationError
from leasedocs.models.template import Template, TemplateFilter, TemplateStats, TemplateType
from leasedocs.services.variables import extract_variables, fill_variables

logger = logging.getLogger(__name__)

_REQUIRED_FIELDS = ("name", "description", "body")
_EDITABLE_FIELDS = ("name", "type", "description", "body", "is_active")


class TemplateStore:
    """Ordered collection of templates.

    Works purely in memory; when a repository is given, templates are loaded
    from it on start and every change is written through.
    """

    def __init__(
        self,
        db: Optional[DatabaseInterface] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._db = db
        self._clock = clock
        self._templates: dict[str, Template] = {}
        if db is not None:
            for row in db.list_templates():
                template = Template(**row)
                self._templates[template.id] = template
            logger.info(f"Loaded {len(self._templates)} templates")

    def _save(self, template: Template) -> None:
        if self._db is not None:
            self._db.upsert_template(template.model_dump())
        self._templates[template.id] = template

    def _require(self, template_id: str) -> Template:
        template = self._templates.get(template_id)
        if template is None:
            raise NotFoundError(f"Template not found: {template_id}")
        return template

    @staticmethod
    def _check_required(values: Mapping[str, object]) -> None:
        for field in _REQUIRED_FIELDS:
            if field in values and not str(values[field] or "").strip():
                raise ValidationError(f"Template {field} is required", field=field)

    def create(
        self,
        name: str,
        type: TemplateType,
        description: str,
        body: str,
        is_active: bool = True,
    ) -> Template:
        """Create a template; variables are derived from body."""
        self._check_required({"name": name, "description": description, "body": body})
        now = self._clock()
        template = Template(
            id=str(uuid4()),
            name=name,
            type=type,
            description=description,
            body=body,
            variables=extract_variables(body),
            is_active=is_active,
            usage_count=0,
            created_date=now,
            last_modified=now,
        )
        self._save(template)
        logger.info(f"Created template {template.id} ({template.name})")
        return template

    def get(self, template_id: str) -> Template:
        return self._require(template_id)

    def update(self, template_id: str, **fields) -> Template:
        """Update editable fields; body changes recompute variables."""
        template = self._require(template_id)
        unknown = set(fields) - set(_EDITABLE_FIELDS)
        if unknown:
            raise ValidationError(
                f"Cannot update field(s): {', '.join(sorted(unknown))}",
                field=sorted(unknown)[0],
            )
        self._check_required(fields)

        changes = dict(fields)
        if "body" in changes and isinstance(changes["body"], str):
            changes["variables"] = extract_variables(changes["body"])
        changes["last_modified"] = self._clock()

        try:
            updated = Template.model_validate({**template.model_dump(), **changes})
        except PydanticValidationError as e:
            error = e.errors()[0]
            field = str(error["loc"][0]) if error["loc"] else None
            raise ValidationError(f"Invalid value for {field}: {error['msg']}", field=field)
        self._save(updated)
        logger.info(f"Updated template {template_id}")
        return updated

    def duplicate(self, template_id: str) -> Template:
        """Copy a template under a new id with ' (Copy)' appended and no usage."""
        original = self._require(template_id)
        now = self._clock()
        copy = original.model_copy(update={
            "id": str(uuid4()),
            "name": f"{original.name} (Copy)",
            "variables": list(original.variables),
            "usage_count": 0,
            "created_date": now,
            "last_modified": now,
        })
        self._save(copy)
        logger.info(f"Duplicated template {template_id} as {copy.id}")
        return copy

    def delete(self, template_id: str) -> None:
        """Remove a template. Documents generated from it are untouched."""
        self._require(template_id)
        del self._templates[template_id]
        if self._db is not None:
            self._db.delete_template(template_id)
        logger.info(f"Deleted template {template_id}")

    def toggle_active(self, template_id: str) -> Template:
        template = self._require(template_id)
        updated = template.model_copy(update={
            "is_active": not template.is_active,
            "last_modified": self._clock(),
        })
        self._save(updated)
        state = "activated" if updated.is_active else "deactivated"
        logger.info(f"Template {template_id} {state}")
        return updated

    def list(self, filter: Optional[TemplateFilter] = None) -> list[Template]:
        """Templates matching filter, in store order."""
        filter = filter or TemplateFilter()
        search = (filter.search_text or "").lower()
        results = []
        for template in self._templates.values():
            if search and search not in template.name.lower() \
                    and search not in template.description.lower():
                continue
            if filter.type is not None and template.type != filter.type:
                continue
            results.append(template)
        return results

    def stats(self) -> TemplateStats:
        templates = list(self._templates.values())
        return TemplateStats(
            total=len(templates),
            active=sum(1 for t in templates if t.is_active),
            by_type={
                t.value: sum(1 for tmpl in templates if tmpl.type == t)
                for t in TemplateType
            },
        )

    def record_usage(self, template_id: str) -> Template:
        """Count one more document produced from this template."""
        template = self._require(template_id)
        updated = template.model_copy(update={"usage_count": template.usage_count + 1})
        self._save(updated)
        return updated

    def render(self, template_id: str, values: Mapping[str, object], strict: bool = False) -> str:
        """Fill an active template's placeholders and record the usage."""
        template = self._require(template_id)
        if not template.is_active:
            raise InvalidStateError(f"Template '{template.name}' is inactive")
        body = fill_variables(template.body, values, strict=strict)
        self.record_usage(template_id)
        return body
