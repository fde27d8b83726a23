import os

DEV_JWT_SECRET = 'dev-secret-change-in-production'


class ConfigError(RuntimeError):
    pass


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///quiztopia.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    APP_ENV = os.environ.get('APP_ENV', 'development')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    # Bearer tokens
    JWT_SECRET = os.environ.get('JWT_SECRET') or DEV_JWT_SECRET
    JWT_ALGORITHM = os.environ.get('JWT_ALGORITHM', 'HS256')
    JWT_EXPIRATION_MINUTES = int(os.environ.get('JWT_EXPIRATION_MINUTES', str(24 * 60)))
    # Password hashing cost
    BCRYPT_LOG_ROUNDS = int(os.environ.get('BCRYPT_SALT_ROUNDS', '10'))
    # Comma separated list; '*' allows any origin
    CORS_ORIGINS = os.environ.get('CORS_ORIGIN', '*')
    LEADERBOARD_DEFAULT_LIMIT = int(os.environ.get('LEADERBOARD_DEFAULT_LIMIT', '10'))
    LEADERBOARD_MAX_LIMIT = int(os.environ.get('LEADERBOARD_MAX_LIMIT', '100'))


def validate_config(cfg) -> None:
    """Check a loaded configuration mapping once at startup.

    Raises ConfigError listing every problem found. The mapping is treated as
    read-only afterwards.
    """
    errors = []
    secret = cfg.get('JWT_SECRET') or ''

    if cfg.get('APP_ENV') == 'production':
        if secret == DEV_JWT_SECRET:
            errors.append('JWT_SECRET must be set in production')
        if len(secret) < 32:
            errors.append('JWT_SECRET must be at least 32 characters long')
        if cfg.get('CORS_ORIGINS') == '*':
            errors.append('CORS_ORIGIN should be restricted in production')

    if not secret:
        errors.append('JWT_SECRET is required')
    if not cfg.get('SQLALCHEMY_DATABASE_URI'):
        errors.append('DATABASE_URL is required')
    if int(cfg.get('JWT_EXPIRATION_MINUTES') or 0) <= 0:
        errors.append('JWT_EXPIRATION_MINUTES must be positive')

    default_limit = int(cfg.get('LEADERBOARD_DEFAULT_LIMIT') or 0)
    max_limit = int(cfg.get('LEADERBOARD_MAX_LIMIT') or 0)
    if not 1 <= default_limit <= max_limit:
        errors.append('LEADERBOARD_DEFAULT_LIMIT must be between 1 and LEADERBOARD_MAX_LIMIT')

    if errors:
        raise ConfigError('Configuration validation failed:\n' + '\n'.join(errors))
