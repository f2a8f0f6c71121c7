"""assessment_server — FastAPI REST API for authoring and filling in assessments."""
