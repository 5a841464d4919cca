"""Application documents and the assembler binding capability parameters into them."""

from .assembler import DocumentAssembler
from .coercion import coerce
from .document import ApplicationDocument, ComponentDocument
from .storage import ApplicationStore

__all__ = [
    "ApplicationDocument",
    "ApplicationStore",
    "ComponentDocument",
    "DocumentAssembler",
    "coerce",
]
