# api/graph_crud.py
#
# The skill catalog lives in Neo4j: one (:Skill) node per skill and a
# (skill)-[:DEPENDS_ON]->(prerequisite) relationship per known prerequisite.
# Each node also keeps its full prerequisite list, since ids that are not in the
# catalog cannot be represented as relationships.

from typing import List

from skill_system.models import Skill


def skill_to_properties(skill: Skill, position: int) -> dict:
    return {
        "id": skill.id,
        "title": skill.title,
        "description": skill.description,
        "category": skill.category.value,
        "level": skill.level,
        "sets": skill.requirement.sets,
        "reps": skill.requirement.reps,
        "requirement_description": skill.requirement.description,
        "prerequisites": list(skill.prerequisites),
        "position": position,
    }


def properties_to_dict(props) -> dict:
    """Turns stored node properties back into the external catalog shape."""
    return {
        "id": props["id"],
        "title": props.get("title"),
        "description": props.get("description") or "",
        "category": props["category"],
        "level": props["level"],
        "requirement": {
            "sets": props["sets"],
            "reps": props["reps"],
            "description": props.get("requirement_description") or "",
        },
        "prerequisites": list(props.get("prerequisites") or []),
    }


# Read Operations


def get_all_skills(tx) -> List[dict]:
    """
    Retrieves every skill in catalog order.
    This function is designed to be called within a transaction
    """
    query = "MATCH (s:Skill) RETURN properties(s) AS skill ORDER BY s.position, s.id"
    result = tx.run(query)
    return [properties_to_dict(record["skill"]) for record in result]


def get_skill_dependencies(tx, skill_id):
    """
    Finds all skills that the given skill has a DEPENDS_ON relationship to.
    """
    query = (
        "MATCH (s:Skill {id: $skill_id})-[:DEPENDS_ON]->(dependency:Skill) "
        "RETURN dependency.id AS dependency_id ORDER BY dependency.position"
    )
    result = tx.run(query, skill_id=skill_id)
    return [record["dependency_id"] for record in result]


# Write Operations


def replace_catalog(tx, skills: List[Skill]):
    """
    Replaces the whole catalog in one transaction: every existing skill node is
    removed, then the new nodes and their DEPENDS_ON edges are created.
    """
    tx.run("MATCH (s:Skill) DETACH DELETE s")

    rows = [skill_to_properties(skill, position) for position, skill in enumerate(skills)]
    tx.run("UNWIND $rows AS row CREATE (s:Skill) SET s = row", rows=rows)

    known = {skill.id for skill in skills}
    edges = [
        {"skill_id": skill.id, "prerequisite_id": prereq}
        for skill in skills
        for prereq in skill.prerequisites
        if prereq in known
    ]
    if edges:
        tx.run(
            "UNWIND $edges AS edge "
            "MATCH (s:Skill {id: edge.skill_id}) "
            "MATCH (p:Skill {id: edge.prerequisite_id}) "
            "MERGE (s)-[:DEPENDS_ON]->(p)",
            edges=edges,
        )
    return len(rows)
