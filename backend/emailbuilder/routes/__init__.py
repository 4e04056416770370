# Routes package init
"""
Email Builder Backend — Routes Package
=======================================

Routers:
    - templates: /api/email-templates CRUD
    - upload:    /api/upload-image
    - health:    /health
"""
