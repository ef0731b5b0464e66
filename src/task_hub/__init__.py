"""Task Hub - checklist tasks with inline annotations across a markdown vault."""

__version__ = "0.1.0"
__author__ = "Task Hub Team"

from .task import Task, TaskStatus, Priority
from .annotations import ParsedAnnotations, decode_annotations, encode_annotations
from .query_engine import QueryParams, QuickDateFilter, SortKey, query
from .mutation import LineMismatch, TaskField, apply_field_change
from .storage import DocumentRef, ReadError, VaultStorage, WriteError
from .hub import TaskHub

__all__ = [
    "Task",
    "TaskStatus",
    "Priority",
    "ParsedAnnotations",
    "decode_annotations",
    "encode_annotations",
    "QueryParams",
    "QuickDateFilter",
    "SortKey",
    "query",
    "LineMismatch",
    "TaskField",
    "apply_field_change",
    "DocumentRef",
    "ReadError",
    "VaultStorage",
    "WriteError",
    "TaskHub",
    "__version__",
]
