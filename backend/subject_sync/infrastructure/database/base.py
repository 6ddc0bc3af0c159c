"""Declarative base shared by every ORM model; ``Base.metadata`` drives table creation."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass
