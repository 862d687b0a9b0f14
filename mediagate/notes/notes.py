"""
Notes attached to a resource.

Authorization (who may add or delete) is decided by the Policy; these
functions only validate and apply the change to a copy of the resource.
"""

from typing import Optional
import logging

from ..core.types import AgentID, Note, OperationResult, Resource
from ..errors import ErrorCode


logger = logging.getLogger(__name__)

DEFAULT_MAX_NOTE_LENGTH = 500


def validate_note_text(text: Optional[str], max_length: int = DEFAULT_MAX_NOTE_LENGTH) -> Optional[ErrorCode]:
    """Return the error kind for invalid note text, or None when it is acceptable."""
    trimmed = (text or "").strip()
    if not trimmed:
        return ErrorCode.EMPTY_NOTE
    if len(trimmed) > max_length:
        return ErrorCode.TEXT_TOO_LONG
    return None


def add_note(resource: Resource, author: AgentID, text: Optional[str],
             max_length: int = DEFAULT_MAX_NOTE_LENGTH) -> OperationResult:
    """
    Append a note with trimmed text.

    Args:
        resource: Resource being annotated
        author: Agent writing the note
        text: Raw note text
        max_length: Maximum length after trimming

    Returns:
        OperationResult: the updated resource, or EMPTY_NOTE / TEXT_TOO_LONG
    """
    error = validate_note_text(text, max_length)
    if error is ErrorCode.TEXT_TOO_LONG:
        return OperationResult.fail(error, f"That note is too long (max {max_length} characters)")
    if error:
        return OperationResult.fail(error)

    updated = resource.copy()
    note = Note(author=author, text=text.strip())
    updated.notes.append(note)
    logger.debug(f"Note {note.id} added to {resource.id} by {author}")
    return OperationResult.ok(updated, "Note posted")


def remove_note(resource: Resource, note_id: str) -> OperationResult:
    """Remove exactly the note with ``note_id``; other notes keep their order."""
    if resource.find_note(note_id) is None:
        return OperationResult.fail(ErrorCode.NOT_FOUND, "Note not found")

    updated = resource.copy()
    updated.notes = [n for n in updated.notes if n.id != note_id]
    logger.debug(f"Note {note_id} removed from {resource.id}")
    return OperationResult.ok(updated, "Note deleted")
