"""Protección de secciones críticas en headers de archivos fuente."""
