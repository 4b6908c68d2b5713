import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from fastapi import APIRouter, Depends, Request
from sqlmodel import Session
from starlette.datastructures import UploadFile
from goldstar.core.errors import ValidationError
from goldstar.db.session import get_session
from goldstar.models.blog import BlogPost
from goldstar.services.blog import BlogService

router = APIRouter()

@dataclass
class BlogPayload:
    fields: Dict[str, Any] = field(default_factory=dict)
    upload: Optional[UploadFile] = None

async def read_blog_payload(request: Request) -> BlogPayload:
    """Blog writes arrive either as JSON or as a multipart form with an image file."""
    content_type = request.headers.get("content-type", "")

    if content_type.startswith(("multipart/form-data", "application/x-www-form-urlencoded")):
        payload = BlogPayload()
        form = await request.form()
        for key, value in form.multi_items():
            if isinstance(value, UploadFile):
                if key == "image" and value.filename:
                    payload.upload = value
            else:
                payload.fields[key] = value
        return payload

    body = await request.body()
    if not body.strip():
        return BlogPayload()
    try:
        fields = json.loads(body)
    except ValueError:
        raise ValidationError("Request body must be valid JSON")
    if not isinstance(fields, dict):
        raise ValidationError("Request body must be a JSON object")
    return BlogPayload(fields=fields)

def get_blog_service(request: Request, session: Session = Depends(get_session)) -> BlogService:
    settings = request.app.state.settings
    return BlogService(session, request.app.state.images, settings.BLOG_UPLOAD_DIR)

@router.get("", response_model=List[BlogPost])
def read_blogs(service: BlogService = Depends(get_blog_service)):
    """All posts, newest first"""
    return service.list_all()

@router.get("/{slug}", response_model=BlogPost)
def read_blog(slug: str, service: BlogService = Depends(get_blog_service)):
    return service.get_by_slug(slug)

@router.post("", response_model=BlogPost, status_code=201)
def create_blog(
    payload: BlogPayload = Depends(read_blog_payload),
    service: BlogService = Depends(get_blog_service)
):
    """
    Create a post. The image may be sent inline as a base64 data URI in the
    ``image`` field, or as a file upload under the same name.
    """
    return service.create(payload.fields, upload=payload.upload)

@router.patch("/{blog_id}", response_model=BlogPost)
def update_blog(
    blog_id: str,
    payload: BlogPayload = Depends(read_blog_payload),
    service: BlogService = Depends(get_blog_service)
):
    """Partial update, fields not sent are left as they are."""
    return service.update(blog_id, payload.fields, upload=payload.upload)

@router.delete("/{blog_id}")
def delete_blog(blog_id: str, service: BlogService = Depends(get_blog_service)):
    service.delete(blog_id)
    return {"message": "Blog post deleted"}
