from sqlalchemy.orm import DeclarativeBase

class Base(DeclarativeBase):
    """
    Declarative base shared by every ORM model (users, catalog).
    """
    pass
