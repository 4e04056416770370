# Services package init
"""
Email Builder Backend — Services Layer
=======================================

What:  Sits between routes (HTTP) and the external collaborators.

Service Inventory:
    - TemplateRepository: store calls for templates + error translation
    - MediaUploader (abstract): interface for hosted image uploads
    - CloudinaryUploader: concrete MediaUploader using the Cloudinary SDK
"""
