"""
Template Store
Built-in and user-contributed component templates with use and like counters.
"""

from datetime import datetime, timezone
from typing import Literal

from pydantic import Field

from ..core import ApiModel, ConflictError, NotFoundError, get_logger
from ..core.id import new_template_id
from .seed import BUILTIN_TEMPLATES, TEMPLATE_CATEGORIES

logger = get_logger(__name__)

TemplateCategory = Literal["landing", "dashboard", "ecommerce", "blog", "portfolio", "saas", "mobile", "other"]
Framework = Literal["react", "nextjs", "vue", "svelte"]
TemplateSort = Literal["popular", "newest", "used"]


class Author(ApiModel):
    name: str
    avatar: str | None = None


class Template(ApiModel):
    id: str
    name: str
    description: str
    category: TemplateCategory
    tags: list[str] = Field(default_factory=list)
    code: str
    preview: str | None = None
    author: Author
    likes: int = 0
    uses: int = 0
    created_at: datetime
    updated_at: datetime
    framework: Framework = "react"
    dependencies: dict[str, str] = Field(default_factory=dict)


class TemplateCreate(ApiModel):
    """Fields a user supplies for a new template."""

    name: str = Field(min_length=1)
    description: str = Field(min_length=1)
    category: TemplateCategory
    code: str = Field(min_length=1)
    tags: list[str] = Field(default_factory=list)
    framework: Framework = "react"
    dependencies: dict[str, str] = Field(default_factory=dict)


class LikeState(ApiModel):
    liked: bool
    likes: int


def _now() -> datetime:
    return datetime.now(timezone.utc)


class TemplateStore:
    """In-memory template catalogue seeded with the built-in templates."""

    categories = TEMPLATE_CATEGORIES

    def __init__(self, seed: bool = True) -> None:
        self._templates: dict[str, Template] = {}
        self._likes: dict[str, set[str]] = {}
        if seed:
            for data in BUILTIN_TEMPLATES:
                template = Template.model_validate(data)
                self._templates[template.id] = template

    def __len__(self) -> int:
        return len(self._templates)

    def list_templates(
        self,
        category: str | None = None,
        search: str | None = None,
        sort: TemplateSort = "popular",
    ) -> list[Template]:
        """
        Filter and sort templates.

        Args:
            category: Exact category, ``None`` or ``"all"`` for every category
            search: Case-insensitive match on name, description or any tag
            sort: ``popular`` (likes), ``newest`` (creation time) or ``used`` (uses)
        """
        templates = list(self._templates.values())

        if category and category != "all":
            templates = [t for t in templates if t.category == category]

        if search:
            query = search.lower()
            templates = [
                t
                for t in templates
                if query in t.name.lower()
                or query in t.description.lower()
                or any(query in tag.lower() for tag in t.tags)
            ]

        if sort == "newest":
            templates.sort(key=lambda t: t.created_at, reverse=True)
        elif sort == "used":
            templates.sort(key=lambda t: t.uses, reverse=True)
        else:
            templates.sort(key=lambda t: t.likes, reverse=True)
        return templates

    def get(self, template_id: str) -> Template | None:
        return self._templates.get(template_id)

    def _require(self, template_id: str) -> Template:
        template = self._templates.get(template_id)
        if template is None:
            raise NotFoundError("Template not found")
        return template

    def popular(self, limit: int = 6) -> list[Template]:
        return sorted(self._templates.values(), key=lambda t: t.uses, reverse=True)[:limit]

    def recent(self, limit: int = 6) -> list[Template]:
        return sorted(self._templates.values(), key=lambda t: t.created_at, reverse=True)[:limit]

    def create(self, author_name: str, data: TemplateCreate) -> Template:
        now = _now()
        template = Template(
            id=new_template_id(),
            author=Author(name=author_name or "Anonymous"),
            created_at=now,
            updated_at=now,
            **data.model_dump(),
        )
        self._templates[template.id] = template
        logger.info("template_created", template_id=template.id, category=template.category)
        return template

    def record_use(self, template_id: str) -> int:
        """Increment the use counter and return the new count."""
        template = self._require(template_id)
        template.uses += 1
        template.updated_at = _now()
        logger.info("template_used", template_id=template_id, uses=template.uses)
        return template.uses

    def is_liked(self, template_id: str, user_id: str) -> bool:
        return template_id in self._likes.get(user_id, set())

    def like(self, template_id: str, user_id: str) -> LikeState:
        template = self._require(template_id)
        liked = self._likes.setdefault(user_id, set())
        if template_id in liked:
            raise ConflictError("Template already liked", code="ALREADY_LIKED")

        liked.add(template_id)
        template.likes += 1
        logger.info("template_liked", template_id=template_id, user_id=user_id, likes=template.likes)
        return LikeState(liked=True, likes=template.likes)

    def unlike(self, template_id: str, user_id: str) -> LikeState:
        template = self._require(template_id)
        liked = self._likes.get(user_id, set())
        if template_id not in liked:
            raise ConflictError("Template not liked", code="NOT_LIKED")

        liked.discard(template_id)
        template.likes = max(0, template.likes - 1)
        logger.info("template_unliked", template_id=template_id, user_id=user_id, likes=template.likes)
        return LikeState(liked=False, likes=template.likes)
