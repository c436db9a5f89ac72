from __future__ import annotations
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..db import get_db
from ..errors import ServerFault
from ..leveling import apply_placement, skip_placement
from ..models import Student
from ..schemas import LevelResponse, PlacementRequest
from .auth import get_current_student


router = APIRouter(tags=["placement"])
logger = logging.getLogger(__name__)


@router.post("/userLevel-update", response_model=LevelResponse)
async def update_user_level(req: PlacementRequest, student: Student = Depends(get_current_student), db: Session = Depends(get_db)):
	"""Set the level from the averaged placement-assessment score (0-10)."""
	try:
		level = apply_placement(db, student, req.score)
	except Exception:
		db.rollback()
		logger.exception("Error applying placement for %s", student.id)
		raise ServerFault()
	return LevelResponse(message="User level updated", user_level=level)


@router.post("/userLevel-skip", response_model=LevelResponse)
async def skip_user_level(student: Student = Depends(get_current_student), db: Session = Depends(get_db)):
	try:
		level = skip_placement(db, student)
	except Exception:
		db.rollback()
		logger.exception("Error skipping placement for %s", student.id)
		raise ServerFault()
	return LevelResponse(message="Placement skipped", user_level=level)
