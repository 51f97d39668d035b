"""Projects API - catalog view, create/edit/delete and image uploads."""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from pydantic import BaseModel, Field, ValidationError

from devhub.deps import get_project_store
from devhub.errors import http_error_for
from devhub.libs.asset_storage import AssetUploadError, ImageFile
from devhub.libs.catalog import CatalogCommandError, CatalogController, FormValidationError, ProjectForm
from devhub.libs.models import Category, Project
from devhub.libs.project_store import ProjectStore

router = APIRouter(tags=["Projects"])

# Pydantic Models

class CatalogResponse(BaseModel):
    """Filtered, paginated catalog view."""
    projects: List[Project]
    category: Category
    search: str
    visible_count: int
    filtered_total: int
    total: int
    has_more: bool

class ProjectPayload(BaseModel):
    """Fields submitted by the project form."""
    title: str = ""
    description: str = ""
    category: Category = Category.UTILITY
    tags: List[str] = []
    image_url: str = ""
    demo_url: Optional[str] = None
    repo_url: Optional[str] = None
    featured: bool = False

class ProjectFormResponse(BaseModel):
    """Initial values for the create/edit form."""
    title: str
    description: str
    category: Category
    tags: List[str]
    image_url: str
    demo_url: str
    repo_url: str
    featured: bool
    editing_id: Optional[str] = None
    created_at: Optional[date] = None

class ImageUploadResponse(BaseModel):
    url: str = Field(..., description="Public URL of the uploaded image")

# Helper Functions

def _form_response(form: ProjectForm) -> ProjectFormResponse:
    return ProjectFormResponse(
        title=form.title,
        description=form.description,
        category=form.category,
        tags=form.tags,
        image_url=form.image_url,
        demo_url=form.demo_url,
        repo_url=form.repo_url,
        featured=form.featured,
        editing_id=form.editing.id if form.editing else None,
        created_at=form.editing.created_at if form.editing else None,
    )


def _fill_form(form: ProjectForm, payload: ProjectPayload) -> ProjectForm:
    form.title = payload.title
    form.description = payload.description
    form.category = payload.category
    form.tags = []
    for tag in payload.tags:
        form.add_tag(tag)
    form.image_url = payload.image_url or form.image_url
    form.demo_url = payload.demo_url or ""
    form.repo_url = payload.repo_url or ""
    form.featured = payload.featured
    return form


def _parse_payload(raw: str) -> ProjectPayload:
    try:
        return ProjectPayload.model_validate_json(raw)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False))


async def _read_image(image: Optional[UploadFile]) -> Optional[ImageFile]:
    if image is None or not image.filename:
        return None
    return ImageFile(
        filename=image.filename,
        content=await image.read(),
        content_type=image.content_type,
    )


async def _save(controller: CatalogController, form: ProjectForm, image: Optional[ImageFile]) -> Project:
    try:
        return await controller.save(form, image)
    except (FormValidationError, CatalogCommandError) as e:
        raise http_error_for(e)

# API Endpoints

@router.get("/projects", response_model=CatalogResponse)
async def get_catalog(
    category: Category = Category.ALL,
    search: str = "",
    visible: Optional[int] = None,
    store: ProjectStore = Depends(get_project_store),
):
    """
    Filtered view of the catalog.

    ``visible`` asks for at least that many items; it is rounded up to whole
    pages, exactly as repeated "load more" clicks would.
    """
    controller = CatalogController(store)
    await controller.load()
    controller.set_category(category)
    controller.set_search(search)
    if visible:
        while controller.visible_count < visible and controller.has_more:
            controller.load_more()

    return CatalogResponse(
        projects=controller.visible,
        category=controller.active_category,
        search=controller.search,
        visible_count=controller.visible_count,
        filtered_total=len(controller.filtered),
        total=len(controller.projects),
        has_more=controller.has_more,
    )


@router.get("/projects/all", response_model=List[Project])
async def list_projects(store: ProjectStore = Depends(get_project_store)):
    """Full catalog, newest first. Falls back to the built-in catalog."""
    return await store.fetch_projects()


@router.get("/projects/form/new", response_model=ProjectFormResponse)
async def new_project_form(store: ProjectStore = Depends(get_project_store)):
    """Empty create form with a fresh placeholder image."""
    return _form_response(CatalogController(store).open_create_form())


@router.get("/projects/{project_id}/form", response_model=ProjectFormResponse)
async def edit_project_form(project_id: str, store: ProjectStore = Depends(get_project_store)):
    """Edit form pre-filled from the current catalog."""
    controller = CatalogController(store)
    await controller.load()
    try:
        return _form_response(controller.open_edit_form(project_id))
    except KeyError:
        raise HTTPException(status_code=404, detail="Project not found")


@router.post("/projects", response_model=Project)
async def create_project(
    project: str = Form(..., description="Project fields as JSON"),
    image: Optional[UploadFile] = File(None),
    store: ProjectStore = Depends(get_project_store),
):
    """
    Create a project.

    If an image is attached it is uploaded first and its URL replaces
    ``image_url``.
    """
    controller = CatalogController(store)
    form = _fill_form(controller.open_create_form(), _parse_payload(project))
    return await _save(controller, form, await _read_image(image))


@router.put("/projects/{project_id}", response_model=Project)
async def update_project(
    project_id: str,
    project: str = Form(..., description="Project fields as JSON"),
    image: Optional[UploadFile] = File(None),
    store: ProjectStore = Depends(get_project_store),
):
    """Replace every field of an existing project."""
    controller = CatalogController(store)
    await controller.load()
    try:
        form = controller.open_edit_form(project_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Project not found")
    form = _fill_form(form, _parse_payload(project))
    return await _save(controller, form, await _read_image(image))


@router.delete("/projects/{project_id}", response_model=List[Project])
async def delete_project(
    project_id: str,
    confirm: bool = False,
    store: ProjectStore = Depends(get_project_store),
):
    """
    Delete a project.

    Requires ``confirm=true``. Returns the catalog as refetched after the
    delete.
    """
    controller = CatalogController(store)
    await controller.load()
    try:
        deleted = await controller.delete(project_id, confirm=lambda _: confirm)
    except KeyError:
        raise HTTPException(status_code=404, detail="Project not found")
    except CatalogCommandError as e:
        raise http_error_for(e)

    if not deleted:
        raise HTTPException(status_code=409, detail="Deletion must be confirmed with confirm=true")
    return controller.projects


@router.post("/projects/images", response_model=ImageUploadResponse)
async def upload_image(
    image: UploadFile = File(...),
    store: ProjectStore = Depends(get_project_store),
):
    """Upload a cover image and return its public URL."""
    file = await _read_image(image)
    if file is None:
        raise HTTPException(status_code=422, detail="No image provided")
    try:
        return ImageUploadResponse(url=await store.upload_image(file))
    except AssetUploadError as e:
        raise http_error_for(e)
