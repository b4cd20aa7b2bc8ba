"""docguard: análisis de impacto y protección de documentación generada."""

__version__ = "0.1.0"
