# ============================================================================
# apps/__init__.py - Application packages
# ============================================================================

# axl: AXL administrative API client
# snr: Single Number Reach provisioning built on it
