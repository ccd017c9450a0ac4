# api/routers/skills.py

import logging
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, status
from neo4j import Driver
from sqlalchemy.engine import Connection

from skill_graph import build_default_catalog
from skill_system.errors import CycleDetected, MalformedProgressImport, UnknownSkillError
from skill_system.experience import experience_summary
from skill_system.layout import compute_layout, filter_skills_by_category
from skill_system.models import Category, SkillCatalog
from skill_system.persistence import ProgressRecordPayload, export_progress, import_progress
from skill_system.resolver import annotate_skills, resolve_statuses, status_counts
from skill_system.store import ProgressStore
from skill_system.tracker import ProgressTracker

from .. import crud, graph_crud, schemas
from ..database import get_db, get_graph_db_driver
from .auth import get_current_admin, get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/skills",
    tags=["skills"],
)


# --- Dependencies ---

def get_catalog(driver: Driver = Depends(get_graph_db_driver)) -> SkillCatalog:
    """
    Loads the skill catalog from the graph. An empty graph serves the default
    bodyweight catalog.
    """
    with driver.session() as session:
        items = session.execute_read(graph_crud.get_all_skills)
    if not items:
        return build_default_catalog()
    return SkillCatalog.from_dicts(items)


def get_progress_store(
    catalog: SkillCatalog = Depends(get_catalog),
    conn: Connection = Depends(get_db),
    current_user: schemas.User = Depends(get_current_user),
) -> ProgressStore:
    """The user's stored progress, re-derived against the current catalog requirements."""
    store = crud.load_progress_store(conn, current_user.email)
    ProgressTracker(catalog, store).reconcile()
    return store


def _resolve_or_409(catalog: SkillCatalog, store: ProgressStore):
    try:
        return annotate_skills(catalog, store)
    except CycleDetected as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


# --- Catalog + status ---

@router.get("", response_model=schemas.SkillsResponse)
def list_skills(
    catalog: SkillCatalog = Depends(get_catalog),
    store: ProgressStore = Depends(get_progress_store),
):
    """
    Every catalog skill merged with the current user's derived status and progress.
    """
    resolved = _resolve_or_409(catalog, store)
    return schemas.SkillsResponse(
        skills=[schemas.SkillWithStatus.from_resolved(item) for item in resolved],
        status_counts=status_counts(resolved),
    )


@router.get("/xp")
def get_total_xp(
    catalog: SkillCatalog = Depends(get_catalog),
    store: ProgressStore = Depends(get_progress_store),
):
    summary = experience_summary(_resolve_or_409(catalog, store))
    return {"totalXP": summary.total_xp}


@router.get("/level", response_model=schemas.ExperienceResponse)
def get_user_level(
    catalog: SkillCatalog = Depends(get_catalog),
    store: ProgressStore = Depends(get_progress_store),
):
    summary = experience_summary(_resolve_or_409(catalog, store))
    return schemas.ExperienceResponse(
        total_xp=summary.total_xp,
        level=summary.level,
        xp_to_next_level=summary.xp_to_next_level,
        level_progress_percent=summary.level_progress_percent,
        completed_count=summary.completed_count,
    )


@router.get("/layout")
def get_layout(
    category: Optional[Category] = None,
    catalog: SkillCatalog = Depends(get_catalog),
    current_user: schemas.User = Depends(get_current_user),
):
    """Node coordinates and prerequisite edges for drawing the tree."""
    return compute_layout(filter_skills_by_category(catalog, category)).to_dict()


@router.put("/catalog", tags=["admin"])
def replace_catalog(
    payload: schemas.CatalogReplace,
    driver: Driver = Depends(get_graph_db_driver),
    current_user: schemas.User = Depends(get_current_admin),
):
    """
    Replaces the whole catalog. Admins only. Recorded progress is kept and re-derived against
    the new requirements on the next read.
    """
    try:
        catalog = SkillCatalog([skill.to_skill() for skill in payload.skills]).validate()
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    except CycleDetected as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    with driver.session() as session:
        count = session.execute_write(graph_crud.replace_catalog, list(catalog))
    logger.info("Catalog replaced by %s with %d skills", current_user.email, count)
    return {"message": f"Catalog replaced with {count} skills"}


# --- Progress (bulk) ---

@router.get("/progress/export")
def export_user_progress(store: ProgressStore = Depends(get_progress_store)):
    return export_progress(store)


@router.post("/progress/import", response_model=schemas.ImportResult)
def import_user_progress(
    payload: dict = Body(...),
    catalog: SkillCatalog = Depends(get_catalog),
    conn: Connection = Depends(get_db),
    current_user: schemas.User = Depends(get_current_user),
):
    """
    Replaces the user's progress with an exported mapping. A malformed payload is
    rejected as a whole and existing progress is left untouched.
    """
    store = crud.load_progress_store(conn, current_user.email)
    try:
        count = import_progress(store, payload, catalog)
    except MalformedProgressImport as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": str(e), "errors": e.errors},
        )
    crud.replace_progress(conn, current_user.email, store)
    return schemas.ImportResult(imported=count)


@router.delete("/progress", status_code=status.HTTP_204_NO_CONTENT)
def reset_user_progress(
    conn: Connection = Depends(get_db),
    current_user: schemas.User = Depends(get_current_user),
):
    crud.clear_progress(conn, current_user.email)
    logger.info("Progress reset for %s", current_user.email)


# --- Progress (single skill) ---

@router.get("/{skill_id}/progress", response_model=schemas.ProgressResponse)
def get_skill_progress(
    skill_id: str,
    catalog: SkillCatalog = Depends(get_catalog),
    store: ProgressStore = Depends(get_progress_store),
):
    if skill_id not in catalog:
        raise HTTPException(status_code=404, detail=f"Skill '{skill_id}' not found")
    record = store.get(skill_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Skill progress not found")
    try:
        statuses = resolve_statuses(catalog, store)
    except CycleDetected as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return schemas.ProgressResponse(
        progress=ProgressRecordPayload.from_record(record), status=statuses[skill_id]
    )


@router.put("/{skill_id}/progress", response_model=schemas.ProgressResponse)
def update_skill_progress(
    skill_id: str,
    update: schemas.ProgressUpdate,
    catalog: SkillCatalog = Depends(get_catalog),
    conn: Connection = Depends(get_db),
    current_user: schemas.User = Depends(get_current_user),
):
    """
    Sets the user's set and/or rep count for a skill. Out-of-range values are
    clamped to the skill's requirement.
    """
    store = crud.load_progress_store(conn, current_user.email)
    tracker = ProgressTracker(catalog, store)
    try:
        record = tracker.apply_update(skill_id, sets=update.sets, reps=update.reps)
    except UnknownSkillError as e:
        raise HTTPException(status_code=404, detail=str(e))

    crud.save_progress_record(conn, current_user.email, record)
    try:
        statuses = resolve_statuses(catalog, store)
    except CycleDetected as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return schemas.ProgressResponse(
        progress=ProgressRecordPayload.from_record(record), status=statuses[skill_id]
    )


# --- Graph queries ---

@router.get("/{skill_id}/path", response_model=List[str])
def get_learning_path(
    skill_id: str,
    catalog: SkillCatalog = Depends(get_catalog),
    current_user: schemas.User = Depends(get_current_user),
):
    """
    Every skill needed to reach the target, foundations first, ending with the target.
    """
    try:
        return catalog.get_learning_path(skill_id)
    except UnknownSkillError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except CycleDetected as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.get("/{skill_id}/dependencies", response_model=List[str])
def read_skill_dependencies(
    skill_id: str,
    driver: Driver = Depends(get_graph_db_driver),
    current_user: schemas.User = Depends(get_current_user),
):
    """
    Retrieve the skills the specified skill directly depends on, as stored in the graph.
    """
    with driver.session() as session:
        dependencies = session.execute_read(graph_crud.get_skill_dependencies, skill_id)
    return dependencies
