# Presentation Layer
# ==================
# FastAPI dashboard and JSON API.
