# ============================================================================
# shared/__init__.py - Database, logging and auth shared by the apps
# ============================================================================
