"""Validación y corrección de fechas en documentación."""
