"""Folio API: blog CMS backend with JWT sessions and permission-based RBAC."""

__version__ = "0.1.0"
