"""Fixed Mail.Ru Cloud endpoints and request defaults."""

from __future__ import annotations

API_VERSION = 2

AUTH_URL = "https://auth.mail.ru/cgi-bin/auth"
CLOUD_URL = "https://cloud.mail.ru"
API_BASE = "https://cloud.mail.ru/api/v2"
FETCH_TOKEN_URL = "https://cloud.mail.ru/api/v2/tokens/csrf"
UPLOAD_URL = "https://cld-upload9.cloud.mail.ru/upload-web/"
DOWNLOAD_URL = "https://cloclo17.datacloudmail.ru/"

PUBLIC_LINK_SEGMENT = "weblink/thumb/xw1/"

# The service rejects unknown clients, so requests pose as a desktop browser.
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows; U; Windows NT 5.1; en-US; rv:1.9.0.1) "
    "Gecko/2008070208 Firefox/3.0.1"
)

DEFAULT_TIMEOUT = 30.0
