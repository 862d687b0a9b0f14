from .notes import add_note, remove_note, validate_note_text

__all__ = ["add_note", "remove_note", "validate_note_text"]
