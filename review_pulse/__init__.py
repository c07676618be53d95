# Review Pulse - Review Sentiment Analysis with Business Follow-up
# ================================================================
# Layered Architecture:
#
# ARCHITECTURE LAYERS:
# - Presentation:   FastAPI dashboard and CLI runner
# - Application:    Use cases and orchestration (no business rules)
# - Domain:         Pure business logic (no external dependencies)
# - Infrastructure: External services (transformers model, review files, Google Sheets)
#
# This design allows easy replacement of infrastructure components
# (e.g., swap the local model for a hosted API, or Sheets for a database).

__version__ = "0.1.0"
