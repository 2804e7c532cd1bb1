"""Domain types, errors and the document codec shared by every layer."""
