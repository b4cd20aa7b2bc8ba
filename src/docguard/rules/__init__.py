"""Reglas de actualización de archivos índice."""
