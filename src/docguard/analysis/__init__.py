"""Análisis de impacto y consistencia del proyecto."""
