from uuid import UUID
from fastapi import Depends, HTTPException
from sqlalchemy.orm import Session

from billing_dashboard.database import SessionLocal
from billing_dashboard.models.project import Project


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_project(project_id: UUID, db: Session = Depends(get_db)) -> Project:
    project = db.query(Project).filter(Project.id == project_id).first()
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    return project
