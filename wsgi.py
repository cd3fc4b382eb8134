import os

# Force production config unless told otherwise
os.environ.setdefault("FLASK_CONFIG", "production")

from hoopfund import create_app  # noqa: E402

app = create_app()
