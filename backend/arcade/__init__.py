from flask import Flask, request
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_login import LoginManager
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
bcrypt = Bcrypt()
login_manager = LoginManager()
migrate = Migrate()
socketio = SocketIO(async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    allowed_origins = flask_app.config.get('CORS_ORIGINS') or []

    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, origins=allowed_origins)

    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from arcade.errors import register_error_handlers
    register_error_handlers(flask_app)

    from arcade.main import main
    flask_app.register_blueprint(main)

    from arcade.api.games import games, shop
    flask_app.register_blueprint(games, url_prefix='/api/game')
    flask_app.register_blueprint(shop, url_prefix='/api/shop')

    from arcade.api.leaderboard import leaderboard
    flask_app.register_blueprint(leaderboard, url_prefix='/api/leaderboard')

    from arcade.api.admin import admin
    flask_app.register_blueprint(admin, url_prefix='/api/admin')

    from arcade.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    # Bearer-token authentication; there is no cookie session
    from arcade.errors import Unauthorized
    from arcade.models import Role
    from arcade.services.sessions import bearer_token, verify_token
    from arcade import store

    @login_manager.request_loader
    def load_account_from_request(req):
        token = bearer_token(req.headers.get('Authorization'))
        if not token:
            return None
        try:
            account_id = verify_token(token)
        except Unauthorized:
            return None
        account = store.get_account_by_id(account_id)
        if account is None or account.role is Role.BANNED:
            return None
        return account

    @login_manager.unauthorized_handler
    def unauthorized():
        if bearer_token(request.headers.get('Authorization')):
            raise Unauthorized('Invalid or expired token')
        raise Unauthorized('No token provided')

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        from arcade.services.accounts import ensure_owner, register
        db.drop_all()
        db.create_all()

        # Seed accounts
        for name in ["testuser1", "testuser2", "testuser3"]:
            register(name, f"{name}@example.com", "password")

        owner = flask_app.config.get("OWNER_USERNAME")
        if owner:
            register(owner, f"{owner}@example.com", "password")
            ensure_owner(owner)
        print('Database has been reset and seeded!')

    @click.command('ensure-owner')
    @click.argument('username', required=False)
    def ensure_owner_command(username):
        """Promotes USERNAME (or OWNER_USERNAME) to the owner role."""
        from arcade.services.accounts import ensure_owner
        username = username or flask_app.config.get('OWNER_USERNAME')
        if not username:
            raise click.UsageError('No username given and OWNER_USERNAME is not set')
        account = ensure_owner(username)
        if account is None:
            print(f'No account named {username}')
        else:
            print(f'{account.username} is now owner')

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(ensure_owner_command)

    return flask_app
