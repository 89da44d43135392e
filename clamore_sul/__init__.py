"""Clamore Sul: sitio institucional, catálogo y panel administrativo."""

__version__ = '1.0.0'
