import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///arcade.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Browser origins allowed to call the API (comma-separated)
    CORS_ORIGINS = [o.strip() for o in os.environ.get(
        'CORS_ORIGINS', 'http://localhost:5173,http://127.0.0.1:5173'
    ).split(',') if o.strip()]
    # Balances handed to a freshly registered account
    STARTING_TOKENS = int(os.environ.get('STARTING_TOKENS', '1000'))
    # Shop: points charged per token bought
    EXCHANGE_RATE = int(os.environ.get('EXCHANGE_RATE', '10'))
    # Session tokens expire after this many seconds (7 days)
    SESSION_MAX_AGE_SEC = int(os.environ.get('SESSION_MAX_AGE_SEC', str(7 * 24 * 3600)))
    LEADERBOARD_LIMIT = int(os.environ.get('LEADERBOARD_LIMIT', '100'))
    HISTORY_LIMIT = int(os.environ.get('HISTORY_LIMIT', '50'))
    ADMIN_SEARCH_LIMIT = int(os.environ.get('ADMIN_SEARCH_LIMIT', '20'))
    # Account promoted to owner by `flask ensure-owner` and `flask db-reset`
    OWNER_USERNAME = os.environ.get('OWNER_USERNAME')
