from __future__ import annotations

from fastapi import FastAPI, status
from fastapi.responses import HTMLResponse

from moodcal.session import SessionStore

__all__ = ["create_callback_app"]

_HELP_PAGE = """
<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8" />
  <title>Mood calendar sign-in</title>
  <style>
    body {{ font-family: system-ui, sans-serif; margin: 2rem; line-height: 1.5; }}
    code {{ background: #f4f4f4; padding: 0.1rem 0.3rem; border-radius: 3px; }}
  </style>
</head>
<body>
  <h1>Sign-in not completed</h1>
  <p>No access token was delivered to this page. Start the sign-in again and
  make sure the redirect points to <code>{callback_url}</code>.</p>
</body>
</html>
"""

_SUCCESS_PAGE = """
<!DOCTYPE html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <title>Mood calendar sign-in</title>
    <style>
      body { font-family: system-ui, sans-serif; text-align: center; padding: 4rem; }
    </style>
  </head>
  <body>
    <h1>Signed in</h1>
    <p>You can close this window and return to the calendar.</p>
    <script>
      try {
        if (window.opener) {
          window.opener.postMessage({ source: 'moodcal.oauth', result: 'success' }, '*');
        }
      } catch (err) {
        console.warn('postMessage failed', err);
      }
    </script>
  </body>
</html>
"""


def create_callback_app(store: SessionStore, *, callback_url: str | None = None) -> FastAPI:
    """Return an app whose ``/callback`` hands the delivered token to ``store``."""

    app = FastAPI(
        title="Mood calendar OAuth callback",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    @app.get("/callback", include_in_schema=False)
    async def oauth_callback(
        access_token: str | None = None,
        token: str | None = None,
    ) -> HTMLResponse:
        delivered = (access_token or token or "").strip()
        if not delivered:
            html = _HELP_PAGE.format(callback_url=callback_url or "/callback")
            return HTMLResponse(content=html, status_code=status.HTTP_400_BAD_REQUEST)
        store.set(delivered)
        return HTMLResponse(content=_SUCCESS_PAGE, status_code=status.HTTP_200_OK)

    return app
