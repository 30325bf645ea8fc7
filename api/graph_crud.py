import uuid
from typing import List, Optional

# Skill nodes keep their relationship lists as properties rather than as
# Neo4j relationships, so one node write is one atomic record write.

SKILL_FIELDS = (
    "id",
    "name",
    "difficulty",
    "type",
    "category",
    "description",
    "previous_skills",
    "next_skills",
    "variations",
)


def _node_to_dict(node) -> dict:
    data = dict(node)
    return {field: data.get(field) for field in SKILL_FIELDS}


# --- Schema ---


def ensure_constraints(tx):
    """Makes Skill.id unique. Safe to run repeatedly."""
    query = (
        "CREATE CONSTRAINT skill_id_unique IF NOT EXISTS "
        "FOR (s:Skill) REQUIRE s.id IS UNIQUE"
    )
    tx.run(query)


# Create Operations


def create_skill(tx, skill_data: dict):
    """
    Creates a new skill node and returns its properties.
    This function is designed to be called within a transaction
    """
    props = {field: skill_data.get(field) for field in SKILL_FIELDS}
    props["id"] = skill_data.get("id") or str(uuid.uuid4())
    for list_field in ("previous_skills", "next_skills", "variations"):
        props[list_field] = list(props[list_field] or [])
    query = "CREATE (s:Skill) SET s = $props RETURN s"
    result = tx.run(query, props=props).single()
    return _node_to_dict(result["s"])


# Read Operations


def get_skill_by_id(tx, skill_id: str) -> Optional[dict]:
    query = "MATCH (s:Skill {id: $skill_id}) RETURN s"
    record = tx.run(query, skill_id=skill_id).single()
    return _node_to_dict(record["s"]) if record else None


def get_all_skills(tx, category: Optional[str] = None) -> List[dict]:
    """
    Retrieves all skill nodes, easiest first.
    This function is designed to be called within a transaction
    """
    query = (
        "MATCH (s:Skill) "
        "WHERE $category IS NULL OR s.category = $category "
        "RETURN s ORDER BY s.difficulty, s.name"
    )
    result = tx.run(query, category=category)
    return [_node_to_dict(record["s"]) for record in result]


# --- Update Operations ---


def update_skill(tx, skill_id: str, fields: dict) -> Optional[dict]:
    """
    Overwrites the given properties of one skill node.
    """
    query = "MATCH (s:Skill {id: $skill_id}) SET s += $fields RETURN s"
    record = tx.run(query, skill_id=skill_id, fields=fields).single()
    return _node_to_dict(record["s"]) if record else None


# --- Delete Operations ---


def delete_skill(tx, skill_id: str) -> bool:
    query = (
        "MATCH (s:Skill {id: $skill_id}) "
        "DETACH DELETE s "
        "RETURN count(s) AS deleted"
    )
    record = tx.run(query, skill_id=skill_id).single()
    return bool(record and record["deleted"])


def delete_all_skills(tx) -> int:
    query = "MATCH (s:Skill) DETACH DELETE s RETURN count(s) AS deleted"
    record = tx.run(query).single()
    return record["deleted"] if record else 0
