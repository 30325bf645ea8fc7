# api/crud.py

import uuid

from sqlalchemy import select, insert, update
from sqlalchemy.engine import Connection
from . import database, schemas
from .security import hash_password

# We use the SQLAlchemy table object defined in database.py


def get_user_by_email(conn: Connection, email: str):
    """Fetches a single user by their email address."""
    query = select(database.users).where(database.users.c.email == email)
    result = conn.execute(query).first()
    return result


def get_user(conn: Connection, user_id: str):
    """Fetches a single user by id."""
    query = select(database.users).where(database.users.c.id == user_id)
    return conn.execute(query).first()


def create_user(conn: Connection, user: schemas.UserCreate):
    """Creates a new user in the database. New users are always Members."""
    # Hash the password from the input schema
    hashed_password = hash_password(user.password)

    # Prepare the user data for insertion, excluding the plain password
    user_data = user.model_dump(exclude={"password"})
    user_data["id"] = str(uuid.uuid4())
    user_data["hashed_password"] = hashed_password
    user_data["is_active"] = True
    user_data["role"] = "Member"

    query = insert(database.users).values(user_data)
    conn.execute(query)

    # Fetch the newly created user to return it
    created_user = get_user(conn, user_data["id"])
    conn.commit()  # Commit the transaction
    return created_user


def update_user_scores(conn: Connection, user_id: str, scores: schemas.UserScoresUpdate):
    """
    Updates the fitness scores and experience level of a user.
    Only the fields that were sent are written.
    """
    values = scores.model_dump(mode="json", exclude_none=True)
    if values:
        stmt = (
            update(database.users)
            .where(database.users.c.id == user_id)
            .values(**values)
        )
        conn.execute(stmt)
        conn.commit()
    return get_user(conn, user_id)
