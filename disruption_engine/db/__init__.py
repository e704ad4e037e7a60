# Database module
from .engine import (
    Base,
    build_engine,
    make_session_factory,
    get_engine,
    get_session_factory,
    init_db,
    session_scope,
    check_connection,
)

__all__ = [
    "Base",
    "build_engine",
    "make_session_factory",
    "get_engine",
    "get_session_factory",
    "init_db",
    "session_scope",
    "check_connection",
]
