"""Base declarative SQLAlchemy partagee par tous les modeles."""
from sqlalchemy.orm import declarative_base

Base = declarative_base()
