import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as SchemaError
from sqlalchemy import desc
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from goldstar.core.errors import NotFound, StorageUnavailable, ValidationError
from goldstar.models.blog import BlogPost, BlogPostCreate, BlogPostUpdate
from goldstar.services.images import ImagePipeline, staged_upload

logger = logging.getLogger("goldstar")


def _describe(error: SchemaError) -> str:
    problems = []
    for item in error.errors():
        field = ".".join(str(part) for part in item["loc"]) or "body"
        problems.append(f"{field}: {item['msg']}")
    return "Blog validation failed: " + ", ".join(problems)


class BlogService:
    def __init__(self, session: Session, images: ImagePipeline, upload_dir: str):
        self.session = session
        self.images = images
        self.upload_dir = upload_dir

    def list_all(self) -> List[BlogPost]:
        try:
            return list(self.session.exec(select(BlogPost).order_by(desc(BlogPost.date))).all())
        except SQLAlchemyError as e:
            raise StorageUnavailable(str(e))

    def get_by_slug(self, slug: str) -> BlogPost:
        try:
            blog = self.session.exec(select(BlogPost).where(BlogPost.slug == slug)).first()
        except SQLAlchemyError as e:
            raise StorageUnavailable(str(e))
        if not blog:
            raise NotFound("Blog post not found")
        return blog

    def get_by_id(self, blog_id: str) -> BlogPost:
        try:
            blog = self.session.get(BlogPost, blog_id)
        except SQLAlchemyError as e:
            raise StorageUnavailable(str(e))
        if not blog:
            raise NotFound("Blog post not found")
        return blog

    def create(self, fields: Dict[str, Any], upload=None) -> BlogPost:
        try:
            data = BlogPostCreate.model_validate(fields)
        except SchemaError as e:
            raise ValidationError(_describe(e))

        # An inline base64 image wins over an attached file
        image = self._ingest(data.image, upload)

        blog = BlogPost(
            title=data.title,
            description=data.description,
            content=data.content,
            slug=data.slug,
            date=data.date or datetime.utcnow(),
            image=image,
        )
        self._save(blog)
        logger.info(f"Created blog post {blog.id} ({blog.slug})")
        return blog

    def update(self, blog_id: str, fields: Dict[str, Any], upload=None) -> BlogPost:
        blog = self.get_by_id(blog_id)

        try:
            changes = BlogPostUpdate.model_validate(fields).model_dump(exclude_unset=True)
            # Validators run against the merged record, not just the patch
            merged = {**blog.model_dump(exclude={"id", "image"}), **changes}
            merged.pop("image", None)
            BlogPostCreate.model_validate(merged)
        except SchemaError as e:
            raise ValidationError(_describe(e))

        # A post always has a date
        if "date" in changes and changes["date"] is None:
            del changes["date"]

        if changes.get("image") or upload is not None:
            changes["image"] = self._ingest(changes.get("image"), upload)
        elif "image" in changes:
            changes["image"] = None

        for key, value in changes.items():
            setattr(blog, key, value)
        self._save(blog)
        logger.info(f"Updated blog post {blog.id}: {', '.join(sorted(changes)) or 'no changes'}")
        return blog

    def delete(self, blog_id: str) -> None:
        blog = self.get_by_id(blog_id)
        try:
            self.session.delete(blog)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StorageUnavailable(str(e))
        logger.info(f"Deleted blog post {blog_id}")

    def _ingest(self, inline: Optional[str], upload) -> Optional[str]:
        if inline:
            return self.images.normalize(inline)
        if upload is not None:
            with staged_upload(upload, self.upload_dir) as path:
                return self.images.normalize_file(path)
        return None

    def _save(self, blog: BlogPost) -> None:
        try:
            self.session.add(blog)
            self.session.commit()
            self.session.refresh(blog)
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StorageUnavailable(str(e))
