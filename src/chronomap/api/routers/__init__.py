"""HTTP routers mounted by :func:`chronomap.api.app.create_app`."""
