"""
Provider package.

Keep package import side-effects to a minimum to avoid circular imports.
Do not import the provider root or resources here.
"""
