"""Local development backend: `uvicorn pawfessional.main:app --port 5000`."""

from pawfessional.core.logging import configure_logging
from pawfessional.infrastructure.api.mock_server import create_mock_api

configure_logging()

app = create_mock_api()
