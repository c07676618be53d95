# Infrastructure Layer
# ====================
# Contains all external service integrations:
# - llm/: transformers sentiment pipeline (plus keyword fallback)
# - importer/: TSV/CSV/Excel review loading
# - sheets/: Google Sheets webhook logging
# - config/: Environment and settings management
#
# This layer can be replaced entirely without affecting domain/application layers.
