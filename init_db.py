import time
from api import graph_crud
from api.database import engine, metadata, get_graph_db_driver, graph_db_manager

# Give the databases a moment to start up
time.sleep(5)

print("Creating database tables...")
metadata.create_all(bind=engine)
print("Tables created successfully.")

print("Creating Neo4j constraints...")
with get_graph_db_driver().session() as session:
    session.execute_write(graph_crud.ensure_constraints)
graph_db_manager.close()
print("Constraints created successfully.")
