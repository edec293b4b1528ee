import logging
import os

from dotenv import load_dotenv

load_dotenv()

PROJECT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

ROOT_DIR = os.path.dirname(PROJECT_DIR)

APPS_DIR = os.path.join(PROJECT_DIR, 'payengine')

BASE_DIR = os.path.join(PROJECT_DIR, 'config')

DEBUG = os.environ.get('DEBUG', 'False').lower() == 'true'

DJANGO_APPS = (
    'django.contrib.auth',
    'django.contrib.contenttypes',
)

THIRD_PARTY_APPS = (
    'rest_framework',
)

PROJECT_APPS = (
    'payengine.formula',
)

INSTALLED_APPS = DJANGO_APPS + THIRD_PARTY_APPS + PROJECT_APPS

SECRET_KEY = os.environ.get('SECRET_KEY', 'payengine-insecure-development-key')

ENVIRONMENT = os.environ.get('ENVIRONMENT', 'development')

# The engine keeps nothing in a database; this only satisfies Django's test
# runner and management commands.
DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': os.environ.get('DATABASE_NAME', ':memory:'),
    }
}

DEFAULT_AUTO_FIELD = 'django.db.models.AutoField'

# Internationalization
TIME_ZONE = 'Asia/Kathmandu'

USE_I18N = True

USE_TZ = True

# Payroll formula engine
# Upper bounds for a single formula
PAYROLL_FORMULA_MAX_EXPRESSION_LENGTH = int(
    os.environ.get('PAYROLL_FORMULA_MAX_EXPRESSION_LENGTH', 1000)
)
PAYROLL_FORMULA_MAX_NESTING_DEPTH = int(
    os.environ.get('PAYROLL_FORMULA_MAX_NESTING_DEPTH', 32)
)

SHOW_LOGS_ON_CONSOLE = os.environ.get('SHOW_LOGS_ON_CONSOLE', 'False').lower() == 'true'

# LOGGING FORMATS AND CONFIGURATIONS
LOG_DIRECTORY = os.environ.get(
    'LOG_DIRECTORY',
    os.path.join(
        PROJECT_DIR if ENVIRONMENT == 'development' else ROOT_DIR,
        'logs'
    )
)
os.makedirs(LOG_DIRECTORY, exist_ok=True)

extend_logging = dict()
extend_handlers = dict()


class RequireConsoleLog(logging.Filter):
    def filter(self, record):
        allowed_site_packages = ('django', 'rest_framework')
        if 'site-packages' in record.pathname:
            return any([x in record.pathname for x in allowed_site_packages])
        return SHOW_LOGS_ON_CONSOLE


for module in PROJECT_APPS:
    extend_logging.update({
        module: {
            'handlers': [module, 'console'],
            'propagate': False,
        }
    })
    extend_handlers.update({
        module: {
            'level': 'DEBUG',
            'class': 'logging.handlers.TimedRotatingFileHandler',
            'formatter': 'verbose',
            'filename': os.path.join(
                LOG_DIRECTORY, module.split('.')[1] + '.log'
            ),
            'when': 'midnight',
        }
    })

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '\n%(levelname)s %(asctime)s %(module)s %(process)d %(thread)d %(message)s',
        },
        'simple': {
            'format': '{levelname} {message} -->from [{module}]',
            'style': '{'
        },
    },
    'filters': {
        'require_debug_true': {
            '()': 'django.utils.log.RequireDebugTrue',
        },
        'require_console_log': {
            '()': RequireConsoleLog
        }
    },
    'handlers': {
        'default': {
            'level': 'DEBUG',
            'class': 'logging.handlers.TimedRotatingFileHandler',
            'filename': os.path.join(LOG_DIRECTORY, 'debug.log'),
            'formatter': 'verbose',
            'when': 'midnight',
        },
        'console': {
            'level': 'DEBUG',
            'filters': ['require_debug_true', 'require_console_log'],
            'class': 'logging.StreamHandler',
            'formatter': 'simple'
        },
        **extend_handlers
    },
    'loggers': {
        '': {
            'handlers': ['default', 'console'],
            'level': 'INFO',
        },
        **extend_logging
    },
}
