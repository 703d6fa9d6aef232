from datetime import date
from typing import List, Optional
from uuid import UUID

from sqlalchemy import asc, desc
from sqlalchemy.orm import Session, selectinload

from tasky.models.entities import Task
from tasky.storage.database import ProjectModel, ProjectTaskModel, UserModel


def _task_order():
    # due date ascending with undated tasks last, then oldest first
    return (ProjectTaskModel.due_date.is_(None), asc(ProjectTaskModel.due_date), asc(ProjectTaskModel.created_at_utc))


class UserRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_email(self, email: str) -> Optional[UserModel]:
        return self.db.query(UserModel).filter(UserModel.email == email).first()

    def email_exists(self, email: str) -> bool:
        return self.get_by_email(email) is not None

    def add(self, email: str, password_hash: str) -> UserModel:
        model = UserModel(email=email, password_hash=password_hash)
        self.db.add(model)
        self.db.commit()
        self.db.refresh(model)
        return model


class ProjectRepository:
    def __init__(self, db: Session):
        self.db = db

    def list_for_user(self, user_id: UUID) -> List[ProjectModel]:
        return (
            self.db.query(ProjectModel)
            .filter(ProjectModel.user_id == user_id)
            .order_by(desc(ProjectModel.created_at_utc))
            .all()
        )

    def get_for_user(self, user_id: UUID, project_id: UUID) -> Optional[ProjectModel]:
        return (
            self.db.query(ProjectModel)
            .filter(ProjectModel.id == project_id, ProjectModel.user_id == user_id)
            .first()
        )

    def get_with_tasks(self, user_id: UUID, project_id: UUID) -> Optional[ProjectModel]:
        return (
            self.db.query(ProjectModel)
            .options(selectinload(ProjectModel.tasks))
            .filter(ProjectModel.id == project_id, ProjectModel.user_id == user_id)
            .first()
        )

    def create(self, user_id: UUID, title: str, description: Optional[str]) -> ProjectModel:
        model = ProjectModel(user_id=user_id, title=title, description=description)
        self.db.add(model)
        self.db.commit()
        self.db.refresh(model)
        return model

    def update(self, user_id: UUID, project_id: UUID, title: str, description: Optional[str]) -> bool:
        model = self.get_for_user(user_id, project_id)
        if not model:
            return False
        model.title = title
        model.description = description
        self.db.commit()
        return True

    def delete(self, user_id: UUID, project_id: UUID) -> bool:
        model = self.get_for_user(user_id, project_id)
        if not model:
            return False
        self.db.delete(model)
        self.db.commit()
        return True

    def task_snapshot(self, user_id: UUID, project_id: UUID) -> Optional[List[Task]]:
        """Return the project's tasks as scheduler input, or None if the project is not the user's."""
        project = self.get_with_tasks(user_id, project_id)
        if project is None:
            return None
        return [
            Task(id=t.id, created_at=t.created_at_utc, due_date=t.due_date, is_completed=t.is_completed)
            for t in project.tasks
        ]


class TaskRepository:
    def __init__(self, db: Session):
        self.db = db

    def _owned(self, user_id: UUID):
        return self.db.query(ProjectTaskModel).join(ProjectModel).filter(ProjectModel.user_id == user_id)

    def list_for_project(self, project_id: UUID) -> List[ProjectTaskModel]:
        return (
            self.db.query(ProjectTaskModel)
            .filter(ProjectTaskModel.project_id == project_id)
            .order_by(*_task_order())
            .all()
        )

    def get_for_user(self, user_id: UUID, task_id: UUID, project_id: Optional[UUID] = None) -> Optional[ProjectTaskModel]:
        query = self._owned(user_id).filter(ProjectTaskModel.id == task_id)
        if project_id is not None:
            query = query.filter(ProjectTaskModel.project_id == project_id)
        return query.first()

    def create(self, project_id: UUID, title: str, due_date: Optional[date]) -> ProjectTaskModel:
        model = ProjectTaskModel(project_id=project_id, title=title, due_date=due_date)
        self.db.add(model)
        self.db.commit()
        self.db.refresh(model)
        return model

    def update(
        self,
        user_id: UUID,
        task_id: UUID,
        title: str,
        due_date: Optional[date],
        is_completed: bool,
        project_id: Optional[UUID] = None,
    ) -> bool:
        model = self.get_for_user(user_id, task_id, project_id)
        if not model:
            return False
        model.title = title
        model.due_date = due_date
        model.is_completed = is_completed
        self.db.commit()
        return True

    def toggle(self, user_id: UUID, task_id: UUID, project_id: Optional[UUID] = None) -> bool:
        model = self.get_for_user(user_id, task_id, project_id)
        if not model:
            return False
        model.is_completed = not model.is_completed
        self.db.commit()
        return True

    def delete(self, user_id: UUID, task_id: UUID, project_id: Optional[UUID] = None) -> bool:
        model = self.get_for_user(user_id, task_id, project_id)
        if not model:
            return False
        self.db.delete(model)
        self.db.commit()
        return True
