"""Bootcamp, course and review writes.

Reads go through the listing helpers; everything that mutates the catalog goes
through here so aggregate recomputation is always scheduled by the unit of work.
"""

from __future__ import annotations

import re
from typing import Any

import structlog
from src.core.errors import Conflict, NotFound
from src.domain import User
from src.infrastructure.db.models import BootcampModel, CourseModel, ReviewModel
from src.infrastructure.repositories.unit_of_work import UnitOfWork

logger = structlog.get_logger()

_SLUG_STRIP = re.compile(r"[^a-z0-9]+")


def slugify(name: str) -> str:
    return _SLUG_STRIP.sub("-", name.lower()).strip("-")


class CatalogService:
    def __init__(self, uow: UnitOfWork) -> None:
        self.uow = uow

    async def get_bootcamp(self, bootcamp_id: str) -> BootcampModel:
        bootcamp = await self.uow.bootcamps.get(bootcamp_id)
        if bootcamp is None:
            raise NotFound(f"No bootcamp with the id of {bootcamp_id}")
        return bootcamp

    async def create_bootcamp(self, user: User, data: dict[str, Any]) -> BootcampModel:
        """Create a bootcamp owned by ``user``; publishers may own only one."""
        if not user.is_admin:
            existing = await self.uow.bootcamps.find_by_owner(user.user_id)
            if existing is not None:
                raise Conflict(f"The user with ID {user.user_id} has already published a bootcamp")

        bootcamp = BootcampModel(**data, slug=slugify(data["name"]), user_id=user.user_id)
        await self.uow.bootcamps.add(bootcamp)
        await self.uow.commit()

        await logger.ainfo("bootcamp_created", bootcamp_id=bootcamp.id, user_id=user.user_id)
        return bootcamp

    async def update_bootcamp(
        self, bootcamp: BootcampModel, changes: dict[str, Any]
    ) -> BootcampModel:
        if "name" in changes:
            changes["slug"] = slugify(changes["name"])
        await self.uow.bootcamps.update(bootcamp, changes)
        await self.uow.commit()

        await logger.ainfo("bootcamp_updated", bootcamp_id=bootcamp.id, fields=sorted(changes))
        return bootcamp

    async def delete_bootcamp(self, bootcamp: BootcampModel) -> None:
        await self.uow.bootcamps.delete(bootcamp)
        await self.uow.commit()
        await logger.ainfo("bootcamp_deleted", bootcamp_id=bootcamp.id)

    async def add_course(
        self, user: User, bootcamp: BootcampModel, data: dict[str, Any]
    ) -> CourseModel:
        course = CourseModel(**data, bootcamp_id=bootcamp.id, user_id=user.user_id)
        await self.uow.courses.add(course)
        await self.uow.commit()

        await logger.ainfo("course_created", course_id=course.id, bootcamp_id=bootcamp.id)
        return course

    async def update_course(self, course: CourseModel, changes: dict[str, Any]) -> CourseModel:
        await self.uow.courses.update(course, changes)
        await self.uow.commit()
        await logger.ainfo("course_updated", course_id=course.id, fields=sorted(changes))
        return course

    async def delete_course(self, course: CourseModel) -> None:
        await self.uow.courses.delete(course)
        await self.uow.commit()
        await logger.ainfo("course_deleted", course_id=course.id, bootcamp_id=course.bootcamp_id)

    async def add_review(self, user: User, bootcamp_id: str, data: dict[str, Any]) -> ReviewModel:
        """Add a review; a second review by the same account is a duplicate."""
        bootcamp = await self.get_bootcamp(bootcamp_id)
        review = ReviewModel(**data, bootcamp_id=bootcamp.id, user_id=user.user_id)
        await self.uow.reviews.add(review)
        await self.uow.commit()

        await logger.ainfo("review_created", review_id=review.id, bootcamp_id=bootcamp.id)
        return review

    async def update_review(self, review: ReviewModel, changes: dict[str, Any]) -> ReviewModel:
        await self.uow.reviews.update(review, changes)
        await self.uow.commit()
        await logger.ainfo("review_updated", review_id=review.id, fields=sorted(changes))
        return review

    async def delete_review(self, review: ReviewModel) -> None:
        await self.uow.reviews.delete(review)
        await self.uow.commit()
        await logger.ainfo("review_deleted", review_id=review.id, bootcamp_id=review.bootcamp_id)
