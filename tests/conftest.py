from tests.fixtures.app_client import admin_token, auth_headers, client, make_settings, settings  # noqa: F401
from tests.fixtures.content_fixtures import blobs, records  # noqa: F401
