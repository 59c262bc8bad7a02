"""Cell-reference codec, ordered row/cell insertion, shared-string interning."""
