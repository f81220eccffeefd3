"""Template catalogue endpoints."""

from fastapi import APIRouter, status

from ...core import ApiModel, ConflictError, ValidationError, get_logger
from ...store import LikeState, Template, TemplateCreate
from ...store.templates import TemplateSort
from ..deps import CurrentUser, Templates

logger = get_logger(__name__)

router = APIRouter(prefix="/api/templates", tags=["templates"])


class TemplateList(ApiModel):
    success: bool = True
    templates: list[Template]
    total: int


class TemplateCreated(ApiModel):
    success: bool = True
    template: Template


class TemplateUse(ApiModel):
    template_id: str


class TemplateUsed(ApiModel):
    success: bool = True
    uses: int


class TemplateLike(LikeState):
    success: bool = True


class Category(ApiModel):
    id: str
    name: str
    icon: str
    color: str


@router.get("", response_model=TemplateList)
async def list_templates(
    templates: Templates,
    category: str | None = None,
    search: str | None = None,
    sort: TemplateSort = "popular",
) -> TemplateList:
    found = templates.list_templates(category=category, search=search, sort=sort)
    logger.info("templates_listed", count=len(found), category=category, search=search, sort=sort)
    return TemplateList(templates=found, total=len(found))


@router.get("/categories", response_model=list[Category])
async def template_categories(templates: Templates) -> list[Category]:
    return [Category.model_validate(c) for c in templates.categories]


@router.get("/popular", response_model=list[Template])
async def popular_templates(templates: Templates, limit: int = 6) -> list[Template]:
    return templates.popular(limit)


@router.get("/recent", response_model=list[Template])
async def recent_templates(templates: Templates, limit: int = 6) -> list[Template]:
    return templates.recent(limit)


@router.post("", response_model=TemplateCreated, status_code=status.HTTP_201_CREATED)
async def create_template(body: TemplateCreate, user: CurrentUser, templates: Templates) -> TemplateCreated:
    template = templates.create(user.name or user.email, body)
    logger.info("template_created_by_user", template_id=template.id, user_id=user.id)
    return TemplateCreated(template=template)


@router.put("", response_model=TemplateUsed)
async def use_template(body: TemplateUse, templates: Templates) -> TemplateUsed:
    """Count one use of a template."""
    return TemplateUsed(uses=templates.record_use(body.template_id))


@router.post("/{template_id}/like", response_model=TemplateLike)
async def like_template(template_id: str, user: CurrentUser, templates: Templates) -> TemplateLike:
    try:
        state = templates.like(template_id, user.id)
    except ConflictError as e:
        raise ValidationError(e.message, code=e.code) from e
    return TemplateLike(liked=state.liked, likes=state.likes)


@router.delete("/{template_id}/like", response_model=TemplateLike)
async def unlike_template(template_id: str, user: CurrentUser, templates: Templates) -> TemplateLike:
    try:
        state = templates.unlike(template_id, user.id)
    except ConflictError as e:
        raise ValidationError(e.message, code=e.code) from e
    return TemplateLike(liked=state.liked, likes=state.likes)
