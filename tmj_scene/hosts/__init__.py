# ============================================
# tmj_scene/hosts/__init__.py
# ============================================
"""Reference host adapters (import explicitly, pulls in pygame)"""
