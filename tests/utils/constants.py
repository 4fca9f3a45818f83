from datetime import datetime, timezone

# Fixed "now" for every test; classes are scheduled relative to it
NOW = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)
CONFIRMATION_WINDOW_MINUTES = 15
